"""
Normalization utilities for spreadsheet cells.

Handles:
- Free-form and numeric date strings (03/04/2024, 13-04-2024, April 15 2024)
- Header cell matching
- Title keys for duplicate detection
"""

import re
from datetime import date, datetime
from typing import Optional

import structlog
from dateutil import parser as date_parser

logger = structlog.get_logger(__name__)


# Two 1-2 digit fields followed by a 4-digit year
NUMERIC_DATE_PATTERNS = [
    re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"),
]

# Fields missing from a free-form date are filled from these; a result
# that differs between the two was not a complete date
PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _build_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_free_form(text: str) -> Optional[date]:
    """dateutil parse that rejects text without a full day, month and year."""
    try:
        first, second = (date_parser.parse(text, default=d) for d in PARSE_DEFAULTS)
    except (ValueError, OverflowError):
        return None

    if first.date() != second.date():
        return None
    return first.date()


def parse_numeric_date(text: str) -> Optional[date]:
    """
    Parse A/B/YYYY or A-B-YYYY.

    Fields are read as month/day first. Only when that is not a valid
    calendar date are they read as day/month, so "03/04/2024" is
    March 4th and "13/04/2024" is April 13th.

    Args:
        text: Trimmed date string

    Returns:
        date or None if no pattern matches or both readings are invalid
    """
    for pattern in NUMERIC_DATE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue

        first, second, year = (int(g) for g in match.groups())

        parsed = _build_date(year, first, second)
        if parsed is None:
            parsed = _build_date(year, second, first)

        if parsed is not None:
            return parsed

    return None


def parse_due_date(text: Optional[str]) -> Optional[date]:
    """
    Parse a due date cell into a calendar date.

    Strategies, in order:
    1. empty or whitespace-only -> None
    2. dateutil free-form parser (month-first default), only when the
       text names a day, month and year
    3. explicit numeric patterns with day-first fallback
    4. None

    Never raises.

    Args:
        text: Raw cell text

    Returns:
        date or None if the text is not a recognizable date
    """
    if not text or not isinstance(text, str):
        return None

    cleaned = text.strip()
    if not cleaned:
        return None

    parsed = _parse_free_form(cleaned)
    if parsed is not None:
        return parsed

    parsed = parse_numeric_date(cleaned)
    if parsed is None:
        logger.debug("unparseable_date", text=cleaned)
    return parsed


def normalize_header(cell: Optional[str]) -> str:
    """
    Normalize a header cell for matching.

    Lowercases, strips and collapses internal whitespace so that
    "  Due   Date " matches "due date".
    """
    if not cell:
        return ""
    return re.sub(r"\s+", " ", cell).strip().lower()


def normalize_title(title: Optional[str]) -> str:
    """Duplicate-detection key for a task title."""
    if not title:
        return ""
    return title.strip().lower()
