"""CLI error handling helpers."""

import click

from ledgercoder.domain.errors import DomainError, file_not_found


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_missing_file(ctx: click.Context, label: str, path: str) -> None:
    """Report a required input file that does not exist and exit with failure."""
    click.echo(f"Error: {file_not_found(label, path)}", err=True)
    ctx.exit(1)
