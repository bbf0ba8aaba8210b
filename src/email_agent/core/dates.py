"""Date helpers shared by summaries, confirmations and persistence."""

from __future__ import annotations

from datetime import date, datetime, timezone

import dateutil.parser


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def format_date(value: date) -> str:
    """``January 5, 2024`` style, as shown in mail subjects."""
    return f"{value:%B} {value.day}, {value:%Y}"


def format_date_short(value: date) -> str:
    return f"{value:%Y-%m-%d}"


def parse_date(raw: str, default: datetime | None = None) -> datetime:
    """Parse a Date header or ISO string into an aware datetime.

    Unparseable input falls back to ``default`` (or now). Naive results are
    assumed to be UTC.
    """
    try:
        parsed = dateutil.parser.parse(raw)
    except (ValueError, OverflowError, TypeError):
        return default or now_utc()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def summary_file_name(value: date | None = None) -> str:
    """One stored summary per calendar day: ``YYYY-MM-DD.json``."""
    return f"{format_date_short(value or date.today())}.json"
