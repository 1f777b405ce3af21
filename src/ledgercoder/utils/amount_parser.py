"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

# Tried in order by parse_amount
_AMOUNT_PATTERNS = (
    re.compile(r"\$([\-\d,\.]+)"),
    re.compile(r"([\-\d,\.]+)\s+[\$USD]+"),
)
_PLAIN_AMOUNT = re.compile(r"^[\-\d,\.]+$")


def to_decimal(token: str) -> Decimal:
    """Convert a numeric token with optional thousands separators to Decimal.

    Raises:
        ValueError: If the token is not a number (e.g. "-" or "1.2.3")
    """
    cleaned = token.replace(",", "").replace("$", "").strip()
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{token}'")


def parse_amount(amount_str: str | int | float | Decimal) -> Decimal:
    """Parse a free-form amount string into a Decimal.

    Handles, in order:
    - "$1,234.56" or "Checking  $-20.00" ($-prefixed token anywhere)
    - "100.00 USD" or "100.00 $" (suffixed token)
    - "-42.10" (bare signed number)

    Anything else, such as a category name with no amount, yields zero.
    Callers treat zero as "no amount provided".

    Args:
        amount_str: Amount string, or an already numeric value

    Returns:
        Decimal amount (Decimal("0") when no amount is present)
    """
    if isinstance(amount_str, Decimal):
        return amount_str
    if isinstance(amount_str, (int, float)):
        return Decimal(str(amount_str))

    text = amount_str.strip()
    token = None
    for pattern in _AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            token = match.group(1)
            break
    else:
        if _PLAIN_AMOUNT.match(text):
            token = text

    if token is None:
        return Decimal("0")

    try:
        return to_decimal(token)
    except ValueError:
        return Decimal("0")


def format_amount(amount: Decimal) -> str:
    """Render an amount with at least two decimal places.

    Extra precision is kept so that parsing the output yields the same value.
    """
    cents = amount.quantize(Decimal("0.01"))
    if cents == amount:
        return f"{cents}"
    return f"{amount.normalize():f}"
