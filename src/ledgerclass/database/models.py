"""SQLAlchemy models for ledgerclass database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Report(Base):
    """Uploaded ledger report model."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    total_records = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    rows = relationship("LedgerRow", back_populates="report", cascade="all, delete-orphan")


class LedgerRow(Base):
    """Ledger row model."""

    __tablename__ = "ledger_rows"

    id = Column(Integer, primary_key=True)
    report_id = Column(Integer, ForeignKey("reports.id"), nullable=False)
    code = Column(String, nullable=False)
    label = Column(String, nullable=True)
    amount = Column(Numeric(18, 2), nullable=True)
    type = Column(String, nullable=True)
    category_1 = Column(String, nullable=True)
    sub_category = Column(String, nullable=True)
    classification = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_ledger_rows_report_code", "report_id", "code"),
        Index("ix_ledger_rows_code", "code"),
    )

    # Relationships
    report = relationship("Report", back_populates="rows")


class ClassificationRule(Base):
    """Classification rule model."""

    __tablename__ = "classification_rules"

    id = Column(Integer, primary_key=True)
    account_code = Column(String, nullable=False)
    account_name = Column(String, nullable=True)
    type = Column(String, nullable=True)
    category_1 = Column(String, nullable=True)
    sub_category = Column(String, nullable=True)
    classification = Column(String, nullable=True)
    hierarchy_level = Column(Integer, nullable=False)
    family_code = Column(String, nullable=False)
    effective_from = Column(DateTime, default=_utcnow, nullable=True)
    effective_to = Column(DateTime, nullable=True)
    created_by = Column(String, nullable=True)
    approved_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_classification_rules_code_active", "account_code", "is_active"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
