"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the classification engine only
ever sees the closed domain shapes, whatever the store hands back.
"""

from ledgerclass.domain import entities as domain
from ledgerclass.database.models import (
    ClassificationRule as ORMClassificationRule,
    LedgerRow as ORMLedgerRow,
    Report as ORMReport,
)


def classification_from_columns(orm_obj: ORMLedgerRow | ORMClassificationRule) -> domain.Classification:
    """Read the four classification columns into a domain Classification."""
    return domain.Classification(
        type=orm_obj.type,
        category_1=orm_obj.category_1,
        sub_category=orm_obj.sub_category,
        classification=orm_obj.classification,
    )


def report_to_domain(orm_report: ORMReport) -> domain.Report:
    """Convert SQLAlchemy Report model to domain Report entity."""
    return domain.Report(
        id=orm_report.id,
        name=orm_report.name,
        file_name=orm_report.file_name,
        month=orm_report.month,
        year=orm_report.year,
        total_records=orm_report.total_records,
        created_at=orm_report.created_at,
    )


def ledger_row_to_domain(orm_row: ORMLedgerRow) -> domain.LedgerRow:
    """Convert SQLAlchemy LedgerRow model to domain LedgerRow entity."""
    return domain.LedgerRow(
        id=orm_row.id,
        report_id=orm_row.report_id,
        code=orm_row.code,
        label=orm_row.label,
        amount=orm_row.amount,
        classification=classification_from_columns(orm_row),
        created_at=orm_row.created_at,
        updated_at=orm_row.updated_at,
    )


def rule_to_domain(orm_rule: ORMClassificationRule) -> domain.ClassificationRule:
    """Convert SQLAlchemy ClassificationRule model to domain ClassificationRule entity."""
    return domain.ClassificationRule(
        id=orm_rule.id,
        account_code=orm_rule.account_code,
        account_name=orm_rule.account_name,
        classification=classification_from_columns(orm_rule),
        hierarchy_level=orm_rule.hierarchy_level,
        family_code=orm_rule.family_code,
        effective_from=orm_rule.effective_from,
        effective_to=orm_rule.effective_to,
        created_by=orm_rule.created_by,
        approved_by=orm_rule.approved_by,
        updated_by=orm_rule.updated_by,
        created_at=orm_rule.created_at,
        updated_at=orm_rule.updated_at,
        is_active=orm_rule.is_active,
    )
