"""
Import orchestrator for the spreadsheet-to-task pipeline.

Coordinates:
- URL validation and identifier extraction
- Sheet download and CSV parsing
- Header mapping and row conversion
- Deduplication against the existing corpus
- Persistence and outcome reporting
"""

import asyncio
from typing import Optional

import httpx
import structlog

from .config.loader import Settings
from .core.deduplicator import TitleDeduplicator
from .core.fetcher import SheetFetcher
from .core.http_client import HttpClient
from .core.locator import SourceLocator
from .core.mapper import build_column_index, map_row
from .core.models import (
    BULK_INSERT_LABEL,
    CandidateTask,
    DedupeStrategy,
    ImportOutcome,
    RowError,
    SkippedRow,
)
from .exceptions import TaskStoreError, ValidationError
from .store.base import TaskStore
from .store.sqlite import SqliteTaskStore

logger = structlog.get_logger(__name__)


class TaskImporter:
    """
    Orchestrates one spreadsheet import.

    Fatal errors (InvalidInput, SourceUnavailable, MalformedSource,
    SchemaError) propagate before anything is written. Per-row problems
    are collected in the returned ImportOutcome.
    """

    def __init__(
        self,
        store: TaskStore,
        settings: Optional[Settings] = None,
        dedupe: Optional[DedupeStrategy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_backoff: float = 1.0,
    ):
        """
        Initialize importer.

        Args:
            store: Task store to read existing tasks from and write to
            settings: Importer settings (defaults if not provided)
            dedupe: Overrides settings.dedupe
            transport: Optional httpx transport for the sheet download
            retry_backoff: Backoff multiplier between fetch retries
        """
        self.store = store
        self.settings = settings or Settings()
        self.dedupe = DedupeStrategy(dedupe or self.settings.dedupe)
        self.transport = transport
        self.retry_backoff = retry_backoff

        self.locator = SourceLocator(self.settings.sheets_host)

        # Statistics of the last run
        self.stats = {
            "rows_read": 0,
            "rows_dropped": 0,
            "imported": 0,
            "skipped": 0,
            "errors": 0,
        }

    async def import_from(self, url: str) -> ImportOutcome:
        """
        Import tasks from a spreadsheet URL.

        Args:
            url: Spreadsheet URL

        Returns:
            ImportOutcome with imported tasks, skipped duplicates and row errors

        Raises:
            InvalidInput: If the URL is not a spreadsheet URL
            SourceUnavailable: If the sheet cannot be downloaded
            MalformedSource: If the sheet is not usable CSV
            SchemaError: If the sheet has no Title column
        """
        self._reset_stats()

        sheet_id = self.locator.locate(url)
        logger.info("starting_import", sheet_id=sheet_id, dedupe=self.dedupe.value)

        rows = await self._fetch_rows(sheet_id)

        index = build_column_index(rows[0])

        candidates: list[CandidateTask] = []
        for row in rows[1:]:
            task = map_row(row, index)
            if task is None:
                self.stats["rows_dropped"] += 1
                continue
            candidates.append(task)

        self.stats["rows_read"] = len(rows) - 1

        if self.dedupe == DedupeStrategy.ENABLED:
            outcome = await self._import_incremental(candidates)
        else:
            outcome = await self._import_bulk(candidates)

        self.stats["imported"] = outcome.imported_count
        self.stats["skipped"] = len(outcome.skipped)
        self.stats["errors"] = len(outcome.errors)

        logger.info("import_complete", sheet_id=sheet_id, **self.stats)

        return outcome

    async def _fetch_rows(self, sheet_id: str) -> list[list[str]]:
        http_client = HttpClient(
            timeout=self.settings.fetch_timeout,
            max_retries=self.settings.max_retries,
            backoff=self.retry_backoff,
            transport=self.transport,
        )

        async with http_client:
            fetcher = SheetFetcher(
                http_client,
                host=self.settings.sheets_host,
                export_url_template=self.settings.export_url_template,
                publish_url_template=self.settings.publish_url_template,
                deadline=self.settings.fetch_timeout,
            )
            return await fetcher.fetch(sheet_id)

    async def _import_incremental(self, candidates: list[CandidateTask]) -> ImportOutcome:
        """Insert one task at a time, skipping titles already present."""
        outcome = ImportOutcome()

        dedup = TitleDeduplicator()
        existing = await asyncio.to_thread(self.store.list_all, page=1, limit=None)
        dedup.seed(task.title for task in existing.records)

        logger.debug("existing_tasks_loaded", count=existing.total_count)

        for task in candidates:
            result = dedup.check(task.title)
            if result.is_duplicate:
                outcome.skipped.append(SkippedRow(title=task.title, reason=result.reason))
                logger.debug("task_skipped_duplicate", title=task.title)
                continue

            try:
                self.store.validate(task)
                stored = await asyncio.to_thread(self.store.insert_one, task)
            except (ValidationError, TaskStoreError) as e:
                outcome.errors.append(RowError(task=task.title, error=str(e)))
                logger.warning("task_insert_failed", title=task.title, error=str(e))
                continue

            outcome.tasks.append(stored)
            dedup.add(task.title)

        outcome.imported_count = len(outcome.tasks)
        return outcome

    async def _import_bulk(self, candidates: list[CandidateTask]) -> ImportOutcome:
        """Insert every candidate in one write, without duplicate checks."""
        outcome = ImportOutcome()

        if not candidates:
            return outcome

        try:
            outcome.imported_count = await asyncio.to_thread(self.store.insert_many, candidates)
        except (ValidationError, TaskStoreError) as e:
            outcome.errors.append(RowError(task=BULK_INSERT_LABEL, error=str(e)))
            logger.error("bulk_insert_failed", count=len(candidates), error=str(e))

        return outcome

    def _reset_stats(self) -> None:
        for key in self.stats:
            self.stats[key] = 0


async def run_import(
    url: str,
    settings: Optional[Settings] = None,
    store: Optional[TaskStore] = None,
    dedupe: Optional[DedupeStrategy] = None,
) -> ImportOutcome:
    """
    Convenience function to run one import.

    Args:
        url: Spreadsheet URL
        settings: Importer settings (defaults if not provided)
        store: Task store (SQLite at settings.db_path if not provided)
        dedupe: Optional dedupe strategy override

    Returns:
        ImportOutcome
    """
    settings = settings or Settings()
    store = store or SqliteTaskStore(settings.db_path)

    importer = TaskImporter(store=store, settings=settings, dedupe=dedupe)
    return await importer.import_from(url)
