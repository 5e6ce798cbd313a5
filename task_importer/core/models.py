"""
Data models for the task importer.

Candidate tasks come out of the row mapper, stored tasks come back from
the task store, and ImportOutcome is the report of one import run.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


# Resource identifier extracted from a spreadsheet URL
ResourceId = str

# One parsed CSV line, header or data
RawRow = list[str]

BULK_INSERT_LABEL = "Bulk Insert"
DUPLICATE_REASON = "Duplicate task title"


class DedupeStrategy(str, Enum):
    """How duplicate titles are handled during import."""
    ENABLED = "enabled"  # Incremental per-title check, one insert per row
    DISABLED = "disabled"  # No check, single bulk insert


@dataclass
class CandidateTask:
    """Task derived from a spreadsheet row, not yet deduplicated or persisted."""

    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    completed: bool = False


@dataclass
class StoredTask:
    """Canonical persisted task as returned by a task store."""

    id: int
    title: str
    description: Optional[str]
    due_date: Optional[date]
    completed: bool
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        """Convert to the camelCase wire shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class TaskUpdate:
    """
    Partial update for a stored task.

    Fields left as None are not touched. Use the clear_* flags to
    set an optional column back to NULL.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    completed: Optional[bool] = None
    clear_description: bool = False
    clear_due_date: bool = False

    def is_empty(self) -> bool:
        return (
            self.title is None
            and self.description is None
            and self.due_date is None
            and self.completed is None
            and not self.clear_description
            and not self.clear_due_date
        )


@dataclass
class TaskPage:
    """One page of stored tasks plus pagination metadata."""

    records: list[StoredTask]
    total_count: int
    page: int = 1
    limit: Optional[int] = None

    @property
    def pages(self) -> int:
        if not self.limit:
            return 1 if self.total_count else 0
        return math.ceil(self.total_count / self.limit)

    def to_dict(self) -> dict:
        return {
            "tasks": [t.to_dict() for t in self.records],
            "pagination": {
                "total": self.total_count,
                "page": self.page,
                "limit": self.limit,
                "pages": self.pages,
            },
        }


@dataclass
class SkippedRow:
    """Row that was not imported on purpose."""
    title: str
    reason: str

    def to_dict(self) -> dict:
        return {"title": self.title, "reason": self.reason}


@dataclass
class RowError:
    """Row (or bulk write) whose persistence failed."""
    task: str
    error: str

    def to_dict(self) -> dict:
        return {"task": self.task, "error": self.error}


@dataclass
class ImportOutcome:
    """
    Result of one import run.

    Returned to the caller and discarded, never persisted.
    """

    imported_count: int = 0
    tasks: list[StoredTask] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def message(self) -> str:
        message = f"Imported {self.imported_count} tasks successfully"
        if self.skipped:
            message += f", skipped {len(self.skipped)} duplicates"
        return message

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        data = {
            "message": self.message,
            "importedCount": self.imported_count,
            "tasks": [t.to_dict() for t in self.tasks],
        }
        if self.skipped:
            data["skippedTasks"] = [s.to_dict() for s in self.skipped]
        if self.errors:
            data["errors"] = [e.to_dict() for e in self.errors]
        return data
