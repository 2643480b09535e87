"""CLI error handling helpers."""

import click


def handle_domain_error(ctx: click.Context, error: Exception) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
