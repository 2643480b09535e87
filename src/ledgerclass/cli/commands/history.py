"""Classification history command."""

import click

from ledgerclass.cli.error_handling import handle_domain_error
from ledgerclass.cli.output import format_amount, format_classification
from ledgerclass.domain.errors import DomainError
from ledgerclass.domain.ledger import LedgerService


@click.command("history")
@click.argument("account_code")
@click.pass_context
def show_history(ctx, account_code: str):
    """Show how an account code was classified in every report."""
    service = LedgerService(ctx.obj["db"], ctx.obj["settings"])

    try:
        history = service.get_classification_history(account_code)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not history:
        click.echo(f"No rows found for account '{account_code}'.")
        return

    click.echo(f"\nHistory for {account_code}:")
    click.echo("-" * 100)
    for entry in history:
        click.echo(
            f"Report {entry.report_id:<5} {entry.report_name[:30]:<30} "
            f"{format_amount(entry.amount):>16}  {format_classification(entry.classification)}"
        )


def register_commands(cli):
    """Register history command with main CLI."""
    cli.add_command(show_history)
