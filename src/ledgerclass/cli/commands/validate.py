"""Hierarchy validation commands."""

import click

from ledgerclass.cli.error_handling import handle_domain_error
from ledgerclass.cli.output import (
    classification_from_options,
    classification_options,
    format_amount,
)
from ledgerclass.domain.errors import DomainError
from ledgerclass.domain.hierarchy_validation import HierarchyValidationService


@click.group()
def validate_group():
    """Validate amounts and classifications across hierarchy levels."""
    pass


@validate_group.command("hierarchy")
@click.argument("report_id", type=int)
@click.pass_context
def validate_hierarchy(ctx, report_id: int):
    """Check that parent accounts equal the sum of their children."""
    service = HierarchyValidationService(ctx.obj["db"], ctx.obj["settings"])

    try:
        results = service.validate_report(report_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not results:
        click.echo(f"Report {report_id}: all parent accounts match their children.")
        return

    click.echo(f"\nReport {report_id}: {len(results)} parent account(s) out of balance")
    click.echo("-" * 100)
    click.echo(f"{'Code':<18} {'Parent':>16} {'Children':>16} {'Variance':>16}  Status")
    click.echo("-" * 100)
    for result in results:
        click.echo(
            f"{result.parent_code:<18} {format_amount(result.parent_amount):>16} "
            f"{format_amount(result.children_sum):>16} {format_amount(result.variance):>16}  "
            f"{result.status.value}"
        )


@validate_group.command("families")
@click.argument("report_id", type=int)
@click.pass_context
def validate_families(ctx, report_id: int):
    """List classified parents whose classified descendants are counted twice."""
    service = HierarchyValidationService(ctx.obj["db"], ctx.obj["settings"])

    try:
        conflicts = service.validate_families(report_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not conflicts:
        click.echo(f"Report {report_id}: no double-counted families.")
        return

    click.echo(f"\nReport {report_id}: {len(conflicts)} double-counted parent account(s)")
    click.echo("-" * 100)
    for conflict in conflicts:
        click.echo(
            f"{conflict.parent_code:<18} {conflict.family_name[:30]:<30} "
            f"{format_amount(conflict.financial_impact):>16}"
        )
        click.echo(f"  classified below: {', '.join(conflict.classified_descendants)}")


@validate_group.command("before-apply")
@click.argument("account_code")
@click.option("--report", "report_id", type=int, required=True, help="Report ID")
@classification_options
@click.pass_context
def validate_before_apply(
    ctx,
    account_code: str,
    report_id: int,
    type_: str | None,
    category_1: str | None,
    sub_category: str | None,
    classification: str | None,
):
    """Check whether classifying an account would double count it.

    Exits with status 1 when the classification conflicts with its parent
    or children.

    Examples:
        ledgerclass validate before-apply 5000-1000-001-000 --report 3 --type Expense
    """
    service = HierarchyValidationService(ctx.obj["db"], ctx.obj["settings"])
    proposed = classification_from_options(type_, category_1, sub_category, classification)

    try:
        check = service.validate_before_apply(account_code, proposed, report_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if check.valid:
        click.echo(f"OK: '{account_code}' can be classified without double counting.")
        return

    click.echo(f"{check.conflict.value}: {check.message}")
    click.echo(f"  Conflicting accounts: {', '.join(check.conflicting_codes)}")
    click.echo(f"  Financial impact: {format_amount(check.financial_impact)}")
    ctx.exit(1)


def register_commands(cli):
    """Register validate commands with main CLI."""
    cli.add_command(validate_group, name="validate")
