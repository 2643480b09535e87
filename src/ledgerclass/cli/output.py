"""Shared rendering helpers for CLI commands."""

from decimal import Decimal
from typing import Optional

import click

from ledgerclass.domain.entities import Classification, RetroactiveImpact


def format_amount(amount: Optional[Decimal]) -> str:
    """Format an amount with thousands separators and two decimals."""
    return f"{amount or Decimal('0'):,.2f}"


def format_classification(classification: Classification) -> str:
    """Render a classification as 'type > category > sub-category > classification'."""
    parts = [value or "-" for value in classification.as_dict().values()]
    return " > ".join(parts)


def print_impact(impact: RetroactiveImpact, verbose: bool = False) -> None:
    """Print a retroactive impact summary."""
    click.echo(f"\nFamily: {impact.family_code}")
    click.echo(f"  Affected records: {impact.affected_records}")
    reports = ", ".join(str(r) for r in impact.affected_reports) or "none"
    click.echo(f"  Affected reports: {reports}")
    click.echo(f"  Total financial impact: {format_amount(impact.total_financial_impact)}")
    click.echo(f"  Estimated processing time: {impact.estimated_processing_time:.1f}s")
    if impact.failures:
        click.echo(f"  Failed records: {len(impact.failures)}")
        for failure in impact.failures:
            click.echo(f"    Row {failure.row_id} (report {failure.report_id}): {failure.reason}", err=True)

    if verbose and impact.changes:
        click.echo("\nChanges:")
        click.echo("-" * 100)
        for change in impact.changes:
            click.echo(
                f"Report {change.report_id:<6} {change.account_code:<18} {format_amount(change.amount):>16}"
            )
            click.echo(f"  old: {format_classification(change.old_classification)}")
            click.echo(f"  new: {format_classification(change.new_classification)}")


def classification_options(func):
    """Add --type/--category/--sub-category/--classification options to a command."""
    options = [
        click.option("--classification", "classification", help="Final classification"),
        click.option("--sub-category", "sub_category", help="Sub-category"),
        click.option("--category", "category_1", help="Category 1"),
        click.option("--type", "type_", help="Type (e.g. 'Income', 'Expense')"),
    ]
    for option in options:
        func = option(func)
    return func


def classification_from_options(
    type_: Optional[str],
    category_1: Optional[str],
    sub_category: Optional[str],
    classification: Optional[str],
) -> Classification:
    return Classification(
        type=type_,
        category_1=category_1,
        sub_category=sub_category,
        classification=classification,
    )
