"""
Base class for task stores.

The importer reads the existing corpus for duplicate detection and
appends new tasks; it never updates or deletes during an import.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from task_importer.core.models import CandidateTask, StoredTask, TaskPage, TaskUpdate
from task_importer.exceptions import ValidationError


MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

TaskRecord = Union[CandidateTask, StoredTask]


class TaskStore(ABC):
    """
    Abstract task store.

    Implementations provide listing, single and bulk inserts and the
    CRUD operations of the task API. Validation is shared.
    """

    @staticmethod
    def validate(task: TaskRecord) -> bool:
        """
        Validate a task record.

        Raises:
            ValidationError: If the title is missing or too long, or the
                description is too long
        """
        title = task.title
        if not title or not title.strip():
            raise ValidationError("Title is required")

        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"Title cannot be more than {MAX_TITLE_LENGTH} characters"
            )

        if task.description and len(task.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description cannot be more than {MAX_DESCRIPTION_LENGTH} characters"
            )

        return True

    @abstractmethod
    def list_all(self, page: int = 1, limit: Optional[int] = None) -> TaskPage:
        """
        List tasks, newest first.

        Args:
            page: Page number (starts from 1)
            limit: Page size; None returns every task

        Returns:
            TaskPage
        """
        pass

    @abstractmethod
    def insert_one(self, task: CandidateTask) -> StoredTask:
        """Insert a task, assigning id and timestamps."""
        pass

    @abstractmethod
    def insert_many(self, tasks: list[CandidateTask]) -> int:
        """
        Insert tasks in a single write.

        All-or-nothing: no row is written if any record is invalid or
        the write fails.

        Returns:
            Number of inserted rows
        """
        pass

    @abstractmethod
    def find_by_id(self, task_id: int) -> Optional[StoredTask]:
        pass

    @abstractmethod
    def update(self, task_id: int, changes: TaskUpdate) -> Optional[StoredTask]:
        """Apply a partial update. Returns None if the task does not exist."""
        pass

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        """Delete a task. Returns True if a row was removed."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass
