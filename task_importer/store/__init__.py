"""
Task storage.

Provides:
- TaskStore: abstract interface used by the importer
- SqliteTaskStore: SQLite implementation
"""

from .base import TaskStore, MAX_TITLE_LENGTH, MAX_DESCRIPTION_LENGTH
from .sqlite import SqliteTaskStore

__all__ = ["TaskStore", "SqliteTaskStore", "MAX_TITLE_LENGTH", "MAX_DESCRIPTION_LENGTH"]
