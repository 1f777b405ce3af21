"""Main CLI entry point."""

import click

from ledgercoder.cli.logging_setup import DEFAULT_LEVEL, configure_logging
from ledgercoder.ledger.factories import create_file_store

# Import and register all commands at module level
from ledgercoder.cli.commands import (
    categories,
    check_uncoded,
    code,
    report,
    version,
)


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    help="Books directory holding transactions/ and coding.ledger (overrides LEDGERCODER_ROOT environment variable)",
    envvar="LEDGERCODER_ROOT",
)
@click.option(
    "--log-level",
    default=DEFAULT_LEVEL,
    show_default=True,
    envvar="LEDGERCODER_LOG_LEVEL",
    help="Logging level (DEBUG, INFO, WARNING, ERROR)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    envvar="LEDGERCODER_LOG_FILE",
    help="Write log records to this file instead of stderr",
)
@click.pass_context
def cli(ctx, root: str | None, log_level: str, log_file: str | None):
    """Ledgercoder - code uncategorized ledger transactions.

    Reads plain-text ledger files from transactions/, lets you assign real
    categories to Income:Unknown and Expenses:Unknown entries, and appends the
    resulting reversal transactions to coding.ledger.
    """
    ctx.ensure_object(dict)

    try:
        configure_logging(log_level, log_file)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level")

    # Only resolve the books directory when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        ctx.obj["store"] = create_file_store(root=root)


# Register all commands
code.register_commands(cli)
check_uncoded.register_commands(cli)
categories.register_commands(cli)
report.register_commands(cli)
version.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
