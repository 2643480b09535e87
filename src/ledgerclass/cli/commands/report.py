"""Report storage commands."""

from pathlib import Path

import click

from ledgerclass.cli.error_handling import handle_domain_error
from ledgerclass.cli.output import format_amount
from ledgerclass.domain.errors import DomainError
from ledgerclass.domain.ledger import LedgerService


@click.group()
def report_group():
    """Store and list ledger reports."""
    pass


@report_group.command("save")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--name", "report_name", required=True, help="Report name")
@click.option("--file-name", help="Original file name (default: CSV file name)")
@click.option("--month", type=int, required=True, help="Report month (1-12)")
@click.option("--year", type=int, required=True, help="Report year")
@click.option("--apply-rules", is_flag=True, help="Classify rows with active rules before saving")
@click.pass_context
def save_report(
    ctx,
    csv_file: str,
    report_name: str,
    file_name: str | None,
    month: int,
    year: int,
    apply_rules: bool,
):
    """Save a ledger export as a new report.

    The CSV needs code, label and amount columns; type, category_1,
    sub_category and classification columns are optional.
    """
    service = LedgerService(ctx.obj["db"], ctx.obj["settings"])

    try:
        rows = service.read_rows_csv(csv_file)
        if apply_rules:
            rows, summary = service.apply_existing_rules(rows)
            click.echo(
                f"Rules applied: {summary.classified_accounts}/{summary.total_accounts} rows classified "
                f"({format_amount(summary.unclassified_amount)} unclassified)"
            )
        result = service.save_with_updated_classifications(
            rows,
            report_name=report_name,
            file_name=file_name or Path(csv_file).name,
            month=month,
            year=year,
        )
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nSaved report {result.report_id}:")
    click.echo(f"  Rows: {result.saved_records}")
    click.echo(f"  Total amount: {format_amount(result.total_amount)}")


@report_group.command("list")
@click.pass_context
def list_reports(ctx):
    """List stored reports."""
    service = LedgerService(ctx.obj["db"], ctx.obj["settings"])

    try:
        reports = service.list_reports()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not reports:
        click.echo("No reports found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<30} {'Period':<8} {'Rows':>6}  File")
    click.echo("-" * 100)
    for report in reports:
        period = f"{report.year}-{report.month:02d}"
        click.echo(
            f"{report.id:<6} {report.name[:30]:<30} {period:<8} {report.total_records:>6}  {report.file_name}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
