"""Classification rule management commands."""

import click

from ledgerclass.cli.error_handling import handle_domain_error
from ledgerclass.cli.output import (
    classification_from_options,
    classification_options,
    format_classification,
    print_impact,
)
from ledgerclass.domain.errors import DomainError
from ledgerclass.domain.rules import RuleService
from ledgerclass.utils.date_parser import parse_effective_date


@click.group()
def rule_group():
    """Manage classification rules."""
    pass


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List active rules."""
    service = RuleService(ctx.obj["db"], ctx.obj["settings"])

    try:
        listings = service.list_active_rules()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not listings:
        click.echo("No active rules found.")
        return

    click.echo(f"\n{'ID':<6} {'Code':<18} {'Level':<6} {'Used':>5}  {'Modified':<19}  Classification")
    click.echo("-" * 100)
    for listing in listings:
        rule = listing.rule
        modified = listing.last_modified.strftime("%Y-%m-%d %H:%M:%S") if listing.last_modified else "-"
        click.echo(
            f"{rule.id:<6} {rule.account_code:<18} {int(rule.hierarchy_level):<6} "
            f"{listing.usage_count:>5}  {modified:<19}  {format_classification(rule.classification)}"
        )


@rule_group.command("create")
@click.argument("account_code")
@classification_options
@click.option("--name", "account_name", help="Account name")
@click.option("--effective-from", help="Start of the rule's window (e.g. '2024-01-01')")
@click.option("--effective-to", help="End of the rule's window")
@click.option("--user", "user_id", required=True, help="User creating the rule")
@click.pass_context
def create_rule(
    ctx,
    account_code: str,
    type_: str | None,
    category_1: str | None,
    sub_category: str | None,
    classification: str | None,
    account_name: str | None,
    effective_from: str | None,
    effective_to: str | None,
    user_id: str,
):
    """Create a rule for an account code.

    Examples:
        ledgerclass rule create 5000-1000-001-002 --type Expense --category Fuel --user ana
    """
    service = RuleService(ctx.obj["db"], ctx.obj["settings"])

    try:
        rule_id = service.create_rule(
            account_code=account_code,
            classification=classification_from_options(type_, category_1, sub_category, classification),
            created_by=user_id,
            account_name=account_name,
            effective_from=parse_effective_date(effective_from) if effective_from else None,
            effective_to=parse_effective_date(effective_to) if effective_to else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created rule {rule_id} for account '{account_code}'")


@rule_group.command("update")
@click.argument("rule_id", type=int)
@classification_options
@click.option("--user", "user_id", required=True, help="User making the change")
@click.option("--retroactive", is_flag=True, help="Rewrite every stored row with this account code")
@click.option("--show-changes", is_flag=True, help="List every rewritten row")
@click.pass_context
def update_rule(
    ctx,
    rule_id: int,
    type_: str | None,
    category_1: str | None,
    sub_category: str | None,
    classification: str | None,
    user_id: str,
    retroactive: bool,
    show_changes: bool,
):
    """Update a rule. Omitted fields keep their current value.

    Examples:
        ledgerclass rule update 4 --sub-category Diesel --user ana --retroactive
    """
    service = RuleService(ctx.obj["db"], ctx.obj["settings"])
    updates = {
        name: value
        for name, value in classification_from_options(
            type_, category_1, sub_category, classification
        ).as_dict().items()
        if value
    }

    try:
        updated_id, impact = service.update_rule(rule_id, updates, user_id, apply_retroactively=retroactive)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Updated rule {updated_id}")
    if retroactive:
        print_impact(impact, verbose=show_changes)


@rule_group.command("deactivate")
@click.argument("rule_id", type=int)
@click.option("--user", "user_id", required=True, help="User making the change")
@click.pass_context
def deactivate_rule(ctx, rule_id: int, user_id: str):
    """Deactivate a rule. The rule is kept for audit."""
    service = RuleService(ctx.obj["db"], ctx.obj["settings"])

    try:
        service.deactivate_rule(rule_id, user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deactivated rule {rule_id}")


@rule_group.command("apply-code")
@click.argument("account_code")
@classification_options
@click.option("--user", "user_id", required=True, help="User making the change")
@click.option("--effective-from", help="Start of the rule's window when a new rule is created")
@click.option("--all-reports", is_flag=True, help="Also rewrite every stored row with this account code")
@click.option("--show-changes", is_flag=True, help="List every rewritten row")
@click.pass_context
def apply_code(
    ctx,
    account_code: str,
    type_: str | None,
    category_1: str | None,
    sub_category: str | None,
    classification: str | None,
    user_id: str,
    effective_from: str | None,
    all_reports: bool,
    show_changes: bool,
):
    """Set the classification of an account code, creating its rule if needed.

    Examples:
        ledgerclass rule apply-code 5000-1000-001-002 --type Expense --category Fuel \\
            --sub-category Diesel --classification Operating --user ana --all-reports
    """
    service = RuleService(ctx.obj["db"], ctx.obj["settings"])

    try:
        rule_id, impact = service.upsert_rule_for_account(
            account_code=account_code,
            classification=classification_from_options(type_, category_1, sub_category, classification),
            user_id=user_id,
            effective_from=parse_effective_date(effective_from) if effective_from else None,
            apply_to_all_reports=all_reports,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Rule {rule_id} now classifies '{account_code}'")
    if all_reports:
        print_impact(impact, verbose=show_changes)


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
