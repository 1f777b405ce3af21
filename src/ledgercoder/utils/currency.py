"""Currency code normalization."""

DEFAULT_CURRENCY = "USD"


def normalize_currency(currency: str | None) -> str:
    """Normalize a currency token to its canonical code.

    "$", "usd", "USD" and " usd " all become "USD"; any other token is
    stripped and upper-cased. A missing token defaults to USD.
    """
    if currency is None:
        return DEFAULT_CURRENCY
    code = str(currency).strip().upper()
    if currency == "$" or code in ("$", "USD"):
        return DEFAULT_CURRENCY
    return code
