"""Family inspection commands."""

import click

from ledgerclass.cli.error_handling import handle_domain_error
from ledgerclass.cli.output import format_amount, format_classification
from ledgerclass.domain.errors import DomainError
from ledgerclass.domain.family import FamilyService


@click.command("family")
@click.argument("account_code")
@click.option("--report", "report_id", type=int, required=True, help="Report ID")
@click.pass_context
def show_family(ctx, account_code: str, report_id: int):
    """Show the family context of an account within a report.

    Examples:
        ledgerclass family 5000-1000-001-002 --report 3
    """
    service = FamilyService(ctx.obj["db"], ctx.obj["settings"])

    try:
        context = service.get_family_context(account_code, report_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nFamily {context.family_code}: {context.family_name}")
    click.echo(f"  Level: {int(context.hierarchy_level)} ({context.hierarchy_level.name.lower()})")
    click.echo(
        f"  Classified: {context.classified_siblings}/{context.total_siblings} "
        f"({context.completeness_percentage:.1f}%)"
    )
    click.echo(f"  Recommended approach: {context.recommended_approach.value}")
    click.echo(f"  Mixed siblings: {'yes' if context.has_mixed_siblings else 'no'}")
    click.echo(f"  Unclassified amount: {format_amount(context.missing_amount)}")
    if context.skipped_codes:
        click.echo(f"  Skipped malformed codes: {', '.join(context.skipped_codes)}")

    if context.siblings:
        click.echo("-" * 100)
        click.echo(f"{'Code':<18} {'Label':<30} {'Amount':>16}  {'Status':<13}")
        click.echo("-" * 100)
        for sibling in context.siblings:
            click.echo(
                f"{sibling.code:<18} {sibling.label[:30]:<30} {format_amount(sibling.amount):>16}  "
                f"{sibling.status.value:<13}"
            )


@click.command("suggest")
@click.argument("account_code")
@click.argument("label")
@click.option("--report", "report_id", type=int, required=True, help="Report ID")
@click.pass_context
def suggest_classification(ctx, account_code: str, label: str, report_id: int):
    """Suggest a classification from an account's classified siblings.

    Examples:
        ledgerclass suggest 5000-1000-001-007 "Diesel" --report 3
    """
    service = FamilyService(ctx.obj["db"], ctx.obj["settings"])

    try:
        suggestion = service.suggest_classification(account_code, label, report_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Suggested: {format_classification(suggestion.classification)}")
    click.echo(f"Source: {suggestion.source} (confidence {suggestion.confidence:.2f})")
    click.echo(suggestion.reasoning)


def register_commands(cli):
    """Register family commands with main CLI."""
    cli.add_command(show_family)
    cli.add_command(suggest_classification)
