"""Date parsing utilities."""

from datetime import date, datetime
import re

from dateutil.relativedelta import relativedelta

LEDGER_DATE_PATTERN = re.compile(r"^\d{4}[/\-]\d{2}[/\-]\d{2}")


def parse_ledger_date(date_str: str) -> date:
    """Parse a ledger header date.

    Both "2024/01/15" and "2024-01-15" are accepted.

    Raises:
        ValueError: If the string is not a valid ledger date
    """
    normalized = date_str.strip().replace("-", "/")
    try:
        return datetime.strptime(normalized, "%Y/%m/%d").date()
    except ValueError as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def format_ledger_date(value: date) -> str:
    """Format a date the way ledger headers are written (YYYY/MM/DD)."""
    return value.strftime("%Y/%m/%d")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a month.

    Raises:
        ValueError: If month is not between 1 and 12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    start = date(year, month, 1)
    end = start + relativedelta(months=1) - relativedelta(days=1)
    return (start, end)


def year_bounds(year: int) -> tuple[date, date]:
    """Return January 1 and December 31 of a year."""
    start = date(year, 1, 1)
    return (start, start + relativedelta(years=1) - relativedelta(days=1))
