"""Report service: balance sheets and income statements via the ledger tool.

The reports themselves are produced by the external ``ledger`` command line
tool. This service only decides which periods to ask for, builds the command
lines, and checks that a balance sheet balances.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional
import logging
import re
import subprocess

from ledgercoder.ledger.base import LedgerStore
from ledgercoder.utils.amount_parser import to_decimal
from ledgercoder.utils.date_parser import format_ledger_date, month_bounds, year_bounds

logger = logging.getLogger(__name__)

LEDGER_EXECUTABLE = "ledger"
LEDGER_OPTIONS = ("--exchange", "USD", "--no-total", "--collapse")
BALANCE_SHEET_ACCOUNTS = ("^Assets", "^Liabilities", "^Equity")
INCOME_STATEMENT_ACCOUNTS = ("^Income", "^Expenses")
DEFAULT_PERIODS = 2
BALANCE_SHEET_TOLERANCE = Decimal("0.01")

_SECTION_TOTAL = re.compile(r"^\s*([\-\$\d,\.]+)\s+USD\s+(Assets|Liabilities|Equity)\b")

CommandRunner = Callable[[list[str]], subprocess.CompletedProcess]


def run_command(args: list[str]) -> subprocess.CompletedProcess:
    """Run a command and capture its text output."""
    return subprocess.run(args, capture_output=True, text=True, check=False)


def balance_sheet_unbalanced(output: str) -> bool:
    """Check ledger balance output for Assets = Liabilities + Equity.

    Only the collapsed top-level lines (``$1,000.00 USD  Assets``) are read;
    sections that do not appear count as zero. A difference of one cent or
    less is treated as balanced.
    """
    totals = {"Assets": Decimal("0"), "Liabilities": Decimal("0"), "Equity": Decimal("0")}
    for line in output.splitlines():
        match = _SECTION_TOTAL.match(line)
        if match:
            totals[match.group(2)] = to_decimal(match.group(1))
    difference = totals["Assets"] - (totals["Liabilities"] + totals["Equity"])
    return abs(difference) > BALANCE_SHEET_TOLERANCE


@dataclass(frozen=True)
class ReportSection:
    """One period of a report and what the ledger tool printed for it."""

    title: str
    command: list[str]
    output: str
    returncode: int
    unbalanced: bool = False

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class ReportService:
    """Service for producing financial reports from the books."""

    def __init__(
        self,
        store: LedgerStore,
        runner: Optional[CommandRunner] = None,
        today: Optional[date] = None,
    ):
        """Initialize report service.

        Args:
            store: Ledger store whose coding log and source files are reported on
            runner: Runs a command line; defaults to a subprocess call
            today: Date used as the end of the current period (default: today)
        """
        self.store = store
        self.runner = runner or run_command
        self.today = today or date.today()

    def ledger_command(
        self, end: date, accounts: tuple[str, ...], begin: Optional[date] = None
    ) -> list[str]:
        """Build the ledger balance command line for a period."""
        args = [LEDGER_EXECUTABLE, "-f", str(self.store.coding_log_path())]
        for path in self.store.source_files():
            args.extend(["-f", str(path)])
        args.append("balance")
        args.extend(LEDGER_OPTIONS)
        if begin is not None:
            args.extend(["--begin", format_ledger_date(begin)])
        args.extend(["--end", format_ledger_date(end)])
        args.extend(accounts)
        return args

    def balance_sheet(
        self, year: Optional[int] = None, month: Optional[int] = None, periods: int = DEFAULT_PERIODS
    ) -> Optional[list[ReportSection]]:
        """Produce balance sheets.

        With a month, one balance sheet as of that month's last day. Otherwise
        one per year end for the previous ``periods`` years, then one as of
        today (current year) or the year end (past years).

        Returns:
            The report sections, or None if the coding log does not exist yet

        Raises:
            ValueError: If month is out of range
        """
        if not self._coding_log_ready():
            return None

        year = year or self.today.year
        if month is not None:
            _, end = month_bounds(year, month)
            return [self._balance_sheet_section(end)]

        sections = [
            self._balance_sheet_section(year_bounds(past_year)[1])
            for past_year in range(year - periods, year)
        ]
        sections.append(self._balance_sheet_section(self._current_period_end(year)))
        return sections

    def income_statement(
        self, year: Optional[int] = None, month: Optional[int] = None, periods: int = DEFAULT_PERIODS
    ) -> Optional[list[ReportSection]]:
        """Produce income statements.

        With a month, one statement for that month. Otherwise one per
        calendar year for the previous ``periods`` years, then the requested
        year.

        Returns:
            The report sections, or None if the coding log does not exist yet

        Raises:
            ValueError: If month is out of range
        """
        if not self._coding_log_ready():
            return None

        year = year or self.today.year
        if month is not None:
            start, end = month_bounds(year, month)
            return [self._run(f"Income Statement for {start.strftime('%B %Y')}", end, INCOME_STATEMENT_ACCOUNTS, start)]

        sections = []
        for past_year in range(year - periods, year):
            start, end = year_bounds(past_year)
            sections.append(self._run(f"Income Statement for {past_year}", end, INCOME_STATEMENT_ACCOUNTS, start))

        start, end = year_bounds(year)
        title = f"Income Statement as of {self._current_period_end(year).isoformat()}"
        sections.append(self._run(title, end, INCOME_STATEMENT_ACCOUNTS, start))
        return sections

    def _coding_log_ready(self) -> bool:
        if self.store.coding_log_exists():
            return True
        logger.warning("Coding log %s does not exist; no report produced", self.store.coding_log_path())
        return False

    def _current_period_end(self, year: int) -> date:
        if year == self.today.year:
            return self.today
        return year_bounds(year)[1]

    def _balance_sheet_section(self, end: date) -> ReportSection:
        return self._run(
            f"Balance Sheet as of {end.isoformat()}",
            end,
            BALANCE_SHEET_ACCOUNTS,
            check_balance=True,
        )

    def _run(
        self,
        title: str,
        end: date,
        accounts: tuple[str, ...],
        begin: Optional[date] = None,
        check_balance: bool = False,
    ) -> ReportSection:
        command = self.ledger_command(end, accounts, begin)
        logger.info("Running %s", " ".join(command))
        try:
            completed = self.runner(command)
        except OSError as e:
            logger.error("Could not run %s: %s", LEDGER_EXECUTABLE, e)
            return ReportSection(title, command, str(e), returncode=127)

        output = completed.stdout or ""
        if completed.returncode != 0:
            logger.error("%s exited with %d: %s", LEDGER_EXECUTABLE, completed.returncode, completed.stderr)
            return ReportSection(title, command, output, completed.returncode)

        unbalanced = check_balance and balance_sheet_unbalanced(output)
        if unbalanced:
            logger.warning("%s is not balanced", title)
        return ReportSection(title, command, output, completed.returncode, unbalanced)
