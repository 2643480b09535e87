"""Date parsing utilities."""

from datetime import datetime, UTC
from dateutil import parser as date_parser


def parse_effective_date(date_str: str) -> datetime:
    """Parse the start or end of a rule's validity window.

    Accepts anything dateutil understands ("2024-01-15", "Jan 15 2024",
    "2024-01-15T08:00:00+00:00") plus "now" and "today".

    Args:
        date_str: Date string

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    now = datetime.now(UTC)
    if text == "now":
        return now
    if text == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)

    try:
        parsed = date_parser.parse(date_str)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
