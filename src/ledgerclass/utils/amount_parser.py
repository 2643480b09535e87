"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_CURRENCY_PATTERN = re.compile(r"[$€£¥]|\b(?:MXN|USD|EUR)\b", re.IGNORECASE)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a ledger amount string into a Decimal.

    Handles the shapes accounting exports produce:
    - "123.45", "-123.45"
    - "$1,234.56", "MXN 1,234.56"
    - "(123.45)" (negative in parentheses)
    - "123.45-" (trailing minus)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]
    elif text.endswith("-"):
        is_negative = True
        text = text[:-1]

    text = _CURRENCY_PATTERN.sub("", text).replace(",", "").replace(" ", "")

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")
    return -amount if is_negative else amount
