"""Version command."""

import click

from ledgercoder import __version__


@click.command("version")
def show_version():
    """Show the ledgercoder version."""
    click.echo(f"ledgercoder version {__version__}")


def register_commands(cli):
    """Register version command with main CLI."""
    cli.add_command(show_version)
