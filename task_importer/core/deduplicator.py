"""
Task deduplication by normalized title.

Titles are compared lowercased and trimmed. The index is seeded from
the existing task corpus and grows as rows of the current batch are
accepted, so a title repeated within one sheet is only imported once.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from .models import DUPLICATE_REASON
from .normalizer import normalize_title

logger = structlog.get_logger(__name__)


@dataclass
class DeduplicationResult:
    """Result of deduplication check."""
    is_duplicate: bool
    key: str
    reason: Optional[str] = None


class TitleDeduplicator:
    """
    Title-based task deduplicator.

    Usage:
        dedup = TitleDeduplicator()
        dedup.seed(task.title for task in existing)
        if not dedup.check("Buy milk").is_duplicate:
            ...
            dedup.add("Buy milk")
    """

    def __init__(self):
        """Initialize deduplicator with empty title index."""
        self._seen: set[str] = set()

    def seed(self, titles: Iterable[str]) -> None:
        """Add titles of already stored tasks to the index."""
        before = len(self._seen)
        for title in titles:
            key = normalize_title(title)
            if key:
                self._seen.add(key)
        logger.debug("dedup_index_seeded", added=len(self._seen) - before)

    def check(self, title: str) -> DeduplicationResult:
        """
        Check if a title is already known.

        Args:
            title: Task title as read from the sheet

        Returns:
            DeduplicationResult
        """
        key = normalize_title(title)
        if key in self._seen:
            return DeduplicationResult(is_duplicate=True, key=key, reason=DUPLICATE_REASON)
        return DeduplicationResult(is_duplicate=False, key=key)

    def add(self, title: str) -> None:
        """Add a title to the index."""
        self._seen.add(normalize_title(title))
