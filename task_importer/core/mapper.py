"""
Row mapping from spreadsheet rows to candidate tasks.

Header cells are matched case-insensitively against the fixed task
schema; each data row becomes a CandidateTask or is dropped.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from task_importer.core.models import CandidateTask, RawRow
from task_importer.core.normalizer import normalize_header, parse_due_date
from task_importer.exceptions import SchemaError

logger = structlog.get_logger(__name__)


# Accepted header spellings per field (after normalize_header)
HEADER_ALIASES = {
    "title": ("title",),
    "description": ("description",),
    "due_date": ("due date", "duedate"),
    "completed": ("completed",),
}

TRUTHY_VALUES = frozenset({"true", "yes", "1"})


@dataclass(frozen=True)
class ColumnIndex:
    """Column positions of the task fields; None when the column is absent."""

    title: int
    description: Optional[int] = None
    due_date: Optional[int] = None
    completed: Optional[int] = None


def _find_column(headers: list[str], aliases: tuple[str, ...]) -> Optional[int]:
    for position, header in enumerate(headers):
        if header in aliases:
            return position
    return None


def build_column_index(header: RawRow) -> ColumnIndex:
    """
    Locate task fields in the header row.

    The first matching column wins when a name appears twice.

    Args:
        header: First row of the sheet

    Returns:
        ColumnIndex

    Raises:
        SchemaError: If there is no Title column
    """
    headers = [normalize_header(cell) for cell in header]

    title = _find_column(headers, HEADER_ALIASES["title"])
    if title is None:
        raise SchemaError('Sheet must contain a "Title" column')

    index = ColumnIndex(
        title=title,
        description=_find_column(headers, HEADER_ALIASES["description"]),
        due_date=_find_column(headers, HEADER_ALIASES["due_date"]),
        completed=_find_column(headers, HEADER_ALIASES["completed"]),
    )
    logger.debug("column_index_built", **vars(index))
    return index


def _cell(row: RawRow, position: Optional[int]) -> Optional[str]:
    """Cell text, or None if the column is absent or the row too short."""
    if position is None or position >= len(row):
        return None
    return row[position]


def parse_completed(value: Optional[str]) -> bool:
    """True for "true", "yes" or "1" in any case; False otherwise."""
    if not value:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def map_row(row: RawRow, index: ColumnIndex) -> Optional[CandidateTask]:
    """
    Convert a data row into a candidate task.

    Returns None for rows without a title (blank or structural rows).
    A due date that cannot be parsed is left out of the task.
    """
    title = (_cell(row, index.title) or "").strip()
    if not title:
        return None

    description = (_cell(row, index.description) or "").strip() or None

    return CandidateTask(
        title=title,
        description=description,
        due_date=parse_due_date(_cell(row, index.due_date)),
        completed=parse_completed(_cell(row, index.completed)),
    )


def map_rows(rows: list[RawRow]) -> list[CandidateTask]:
    """
    Map a full sheet (header first) to candidate tasks.

    Raises:
        SchemaError: If the header has no Title column
    """
    if not rows:
        return []

    index = build_column_index(rows[0])

    tasks = []
    for row in rows[1:]:
        task = map_row(row, index)
        if task is not None:
            tasks.append(task)

    dropped = len(rows) - 1 - len(tasks)
    if dropped:
        logger.info("rows_dropped", dropped=dropped, reason="missing_title")

    return tasks
