"""Transaction coding command."""

from pathlib import Path

import click

from ledgercoder.cli.error_handling import handle_domain_error, handle_missing_file
from ledgercoder.cli.terminal import ClickTerminal
from ledgercoder.config import CodingOptions, load_suggestion_settings
from ledgercoder.domain.books import BookService
from ledgercoder.domain.category import CategoryCatalog
from ledgercoder.domain.coding import CodingEngine
from ledgercoder.domain.errors import DomainError
from ledgercoder.domain.reconcile import ReconciliationService
from ledgercoder.domain.session import (
    CodingSession,
    InteractiveResponses,
    RecordingResponses,
    ReplayResponses,
)
from ledgercoder.domain.suggestion import SuggestionGateway
from ledgercoder.providers.openai_suggestions import OpenAISuggestionClient


def _build_gateway(options: CodingOptions, api_key: str | None, catalog, history):
    """Return a suggestion gateway, or None when suggestions are off or unconfigured."""
    if not options.use_ai_suggestions:
        return None
    settings = load_suggestion_settings(api_key=api_key)
    if not settings.has_credentials:
        click.echo("Warning: No OpenAI API key configured; continuing without AI suggestions.")
        return None
    return SuggestionGateway(OpenAISuggestionClient(settings), catalog, history)


def _reconcile(books: BookService, engine: CodingEngine, uncoded, reconcile_file: Path) -> bool:
    """Code transactions from a reconciliation file. Returns True if every row succeeded."""
    results = ReconciliationService(books, engine).reconcile_file(uncoded, reconcile_file)
    for transaction_id, categories in results["coded"]:
        click.echo(f"Coded transaction {transaction_id} with category {categories}")
    for error in results["errors"]:
        click.echo(f"✗ {error}")
    click.echo(f"\nResults: {len(results['coded'])} coded, {len(results['errors'])} failed")
    return not results["errors"]


@click.command("code")
@click.option(
    "--reconcile-file",
    "-f",
    type=click.Path(dir_okay=False),
    help="Code transactions from a file of 'transaction_id,category[:amount],...' lines",
)
@click.option(
    "--response-file",
    "-r",
    type=click.Path(dir_okay=False),
    help="Replay answers from a file instead of prompting",
)
@click.option(
    "--save-responses-file",
    "-s",
    type=click.Path(dir_okay=False),
    help="Save every answer to a file for later replay",
)
@click.option(
    "--openai-api-key",
    "-k",
    envvar="OPENAI_API_KEY",
    help="OpenAI API key for category suggestions (overrides OPENAI_API_KEY environment variable)",
)
@click.option("--disable-ai", "-d", is_flag=True, help="Do not ask for AI category suggestions")
@click.option("--auto-apply-ai", "-a", is_flag=True, help="Apply AI suggestions without prompting")
@click.pass_context
def code_transactions(
    ctx,
    reconcile_file: str | None,
    response_file: str | None,
    save_responses_file: str | None,
    openai_api_key: str | None,
    disable_ai: bool,
    auto_apply_ai: bool,
):
    """Code uncategorized transactions.

    Every transaction with an Income:Unknown or Expenses:Unknown entry that
    is not yet in coding.ledger is offered for coding. Each choice appends a
    reversal transaction to coding.ledger, so an interrupted run can simply
    be started again.

    Examples:
        ledgercoder code
        ledgercoder code --reconcile-file reconcile.csv
        ledgercoder code --disable-ai --response-file answers.txt
    """
    options = CodingOptions(
        use_ai_suggestions=not disable_ai,
        auto_apply_ai=auto_apply_ai,
        response_file=Path(response_file) if response_file else None,
        save_responses_file=Path(save_responses_file) if save_responses_file else None,
        reconcile_file=Path(reconcile_file) if reconcile_file else None,
    )
    if options.reconcile_file and options.response_file:
        click.echo("Error: --reconcile-file and --response-file cannot be combined.", err=True)
        ctx.exit(1)

    books = BookService(ctx.obj["store"])
    catalog = CategoryCatalog()
    engine = CodingEngine(catalog)

    uncoded = books.uncoded_transactions()
    if not uncoded:
        click.echo("No uncoded transactions found.")
        return
    click.echo(f"Found {len(uncoded)} uncoded transactions.")

    if options.reconcile_file:
        if not options.reconcile_file.exists():
            handle_missing_file(ctx, "Reconciliation file", str(options.reconcile_file))
        if not _reconcile(books, engine, uncoded, options.reconcile_file):
            ctx.exit(1)
        return

    if options.response_file and not options.response_file.exists():
        handle_missing_file(ctx, "Response file", str(options.response_file))

    terminal = ClickTerminal()
    if options.response_file:
        responses = ReplayResponses.from_file(terminal, options.response_file)
    else:
        responses = InteractiveResponses(terminal)
    if options.save_responses_file:
        responses = RecordingResponses(responses, options.save_responses_file)

    try:
        history = books.load_history()
        gateway = _build_gateway(options, openai_api_key, catalog, history)
        session = CodingSession(
            books,
            engine,
            history,
            terminal,
            responses,
            gateway=gateway,
            auto_apply=options.auto_apply_ai and gateway is not None,
        )
        result = session.run(uncoded)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Coded {len(result.coded)} transactions.")
    if result.skipped:
        click.echo(f"{len(result.skipped)} transactions were left uncoded:")
        for transaction in result.skipped:
            click.echo(f"  {transaction.transaction_id} {transaction.description}")


def register_commands(cli):
    """Register coding commands with main CLI."""
    cli.add_command(code_transactions)
