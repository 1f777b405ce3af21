"""Financial report commands."""

import click

from ledgercoder.domain.report import DEFAULT_PERIODS, ReportService

SEPARATOR_WIDTH = 50


def _print_sections(sections) -> bool:
    """Print report sections. Returns True if every ledger run succeeded."""
    ok = True
    for section in sections:
        click.echo(section.title)
        click.echo("-" * SEPARATOR_WIDTH)
        if section.succeeded:
            click.echo(section.output)
            if section.unbalanced:
                click.echo("Note: The balance sheet is not balanced (Assets != Liabilities + Equity).")
        else:
            ok = False
            click.echo(f"Error generating report (exit code: {section.returncode})")
            click.echo(f"Command was: {' '.join(section.command)}")
    return ok


def _report_options(func):
    """Options shared by both reports."""
    func = click.option(
        "--periods",
        "-p",
        type=click.IntRange(min=0),
        default=DEFAULT_PERIODS,
        show_default=True,
        help="Number of previous years to include",
    )(func)
    func = click.option("--month", "-m", type=click.IntRange(1, 12), help="Report a single month (1-12)")(func)
    func = click.option("--year", "-y", type=int, help="Year to report (default: current year)")(func)
    return func


def _print_heading(title: str, year: int, month: int | None, periods: int) -> None:
    click.echo(f"{title} for {year}")
    if month:
        click.echo(f"Month: {month}")
    else:
        click.echo(f"Including previous {periods} years")
    click.echo("=" * SEPARATOR_WIDTH)
    click.echo()


def _missing_coding_log(report_name: str) -> None:
    click.echo(
        "Warning: coding.ledger file does not exist. "
        "Please run 'ledgercoder code' first to process and code your transactions."
    )
    click.echo(f"Without coding, the {report_name} cannot be generated correctly.")


@click.command("balance-sheet")
@_report_options
@click.pass_context
def balance_sheet(ctx, year: int | None, month: int | None, periods: int):
    """Show balance sheets produced by the ledger tool.

    Examples:
        ledgercoder balance-sheet
        ledgercoder balance-sheet --year 2023 --periods 1
        ledgercoder balance-sheet --year 2024 --month 3
    """
    service = ReportService(ctx.obj["store"])
    year = year or service.today.year
    _print_heading("Balance Sheet", year, month, periods)

    sections = service.balance_sheet(year=year, month=month, periods=periods)
    if sections is None:
        _missing_coding_log("balance sheet")
        return
    if not _print_sections(sections):
        ctx.exit(1)


@click.command("income-statement")
@_report_options
@click.pass_context
def income_statement(ctx, year: int | None, month: int | None, periods: int):
    """Show income statements produced by the ledger tool.

    Examples:
        ledgercoder income-statement
        ledgercoder income-statement --year 2024 --month 3
    """
    service = ReportService(ctx.obj["store"])
    year = year or service.today.year
    _print_heading("Income Statement", year, month, periods)

    sections = service.income_statement(year=year, month=month, periods=periods)
    if sections is None:
        _missing_coding_log("income statement")
        return
    if not _print_sections(sections):
        ctx.exit(1)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(balance_sheet)
    cli.add_command(income_statement)
