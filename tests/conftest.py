"""Shared pytest fixtures for ledgerclass tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest
import structlog

from ledgerclass.config import Settings
from ledgerclass.database.factories import create_sqlite_database
from ledgerclass.domain.entities import Classification, NewLedgerRow
from ledgerclass.domain.family import FamilyService
from ledgerclass.domain.hierarchy_validation import HierarchyValidationService
from ledgerclass.domain.ledger import LedgerService
from ledgerclass.domain.retroactive import RetroactiveService
from ledgerclass.domain.rules import RuleService


FUEL = Classification(
    type="Expense",
    category_1="Operations",
    sub_category="Fuel",
    classification="Operating Expense",
)


def make_row(code, label, amount, classification=None):
    """Build an incoming ledger row."""
    return NewLedgerRow(
        code=code,
        label=label,
        amount=Decimal(str(amount)),
        classification=classification or Classification(),
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Default engine settings."""
    return Settings()


@pytest.fixture
def family_service(temp_db, settings):
    """Create a FamilyService with a temporary database."""
    return FamilyService(temp_db, settings)


@pytest.fixture
def rule_service(temp_db, settings):
    """Create a RuleService with a temporary database."""
    return RuleService(temp_db, settings)


@pytest.fixture
def retroactive_service(temp_db, settings):
    """Create a RetroactiveService with a temporary database."""
    return RetroactiveService(temp_db, settings)


@pytest.fixture
def ledger_service(temp_db, settings):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db, settings)


@pytest.fixture
def validation_service(temp_db):
    """Create a HierarchyValidationService with a temporary database."""
    return HierarchyValidationService(temp_db)


@pytest.fixture
def save_report(temp_db):
    """Return a helper that stores rows under a new report and returns its ID."""

    def _save(rows, name="Test Report", month=1, year=2024):
        report_id = temp_db.create_report(
            name=name,
            file_name=f"{name}.csv",
            month=month,
            year=year,
            total_records=len(rows),
        )
        temp_db.add_ledger_rows(report_id, rows)
        return report_id

    return _save


@pytest.fixture
def fuel_family_report(save_report):
    """A report holding one family: a root, a subcategory and four detail accounts.

    Two of the detail accounts are fully classified, one carries sentinel
    values and one has no classification at all.
    """
    rows = [
        make_row("5000-1000-000-000", "Operating Costs", "1000.00", FUEL),
        make_row("5000-1000-001-000", "Fuel", "1000.00", FUEL),
        make_row("5000-1000-001-001", "Gasoline", "400.00", FUEL),
        make_row("5000-1000-001-002", "Diesel", "300.00", FUEL),
        make_row(
            "5000-1000-001-003",
            "Lubricants",
            "200.00",
            Classification("Undefined", "No Category", "No Subcategory", "No Classification"),
        ),
        make_row("5000-1000-001-004", "Additives", "100.00"),
        make_row("5100-2000-001-001", "Other family", "999.00", FUEL),
    ]
    return save_report(rows, name="Fuel Report")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
