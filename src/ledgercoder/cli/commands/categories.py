"""Category listing command."""

import click

from ledgercoder.domain.category import CATEGORY_PREFIXES, CategoryCatalog


@click.command("categories")
def list_categories():
    """List the categories offered when coding, with their menu numbers."""
    catalog = CategoryCatalog()
    for kind, prefix in CATEGORY_PREFIXES.items():
        click.echo(f"\n{prefix.rstrip(':')}:")
        for category in catalog.categories(kind):
            click.echo(f"  {catalog.option_number(category):>3}. {category}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(list_categories)
