"""Main CLI entry point."""

import click

from ledgerclass.config import Settings
from ledgerclass.database.factories import create_sqlite_database
from ledgerclass.logging_config import configure_logging

# Import and register all commands at module level
from ledgerclass.cli.commands import (
    family,
    history,
    report,
    rule,
    validate,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERCLASS_DB_PATH environment variable)",
    envvar="LEDGERCLASS_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log engine events to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Ledgerclass - account hierarchy classification for ledger exports.

    Inspect account families, manage classification rules and apply them
    retroactively across stored reports.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["settings"] = Settings.from_env()
        except ValueError as e:
            click.echo(f"Error: Invalid LEDGERCLASS_* setting: {e}", err=True)
            ctx.exit(1)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
family.register_commands(cli)
history.register_commands(cli)
report.register_commands(cli)
rule.register_commands(cli)
validate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
