"""Uncoded transaction check command."""

import click

from ledgercoder.domain.books import BookService


@click.command("check-uncoded")
@click.pass_context
def check_uncoded(ctx):
    """List source transactions that have not been coded yet."""
    books = BookService(ctx.obj["store"])
    if not books.store.coding_log_exists():
        click.echo("Warning: coding.ledger does not exist yet. Run 'ledgercoder code' first.")

    uncoded = books.check_uncoded()
    if not uncoded:
        click.echo("All transactions have been coded.")
        return

    click.echo(f"Found {len(uncoded)} uncoded transactions:\n")
    for transaction in uncoded:
        click.echo(str(transaction))
        click.echo()


def register_commands(cli):
    """Register uncoded check commands with main CLI."""
    cli.add_command(check_uncoded)
