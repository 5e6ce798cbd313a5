"""
Core layer - stable foundation for the import pipeline.

Components:
- models: CandidateTask, StoredTask, ImportOutcome dataclasses
- http_client: Retrying HTTP client with bounded timeout
- locator: Spreadsheet URL validation and identifier extraction
- fetcher: CSV export download and parsing
- mapper: Header matching and row-to-task conversion
- normalizer: Date, header and title normalization
- deduplicator: Title-based task deduplication
"""

from .models import (
    CandidateTask,
    StoredTask,
    TaskUpdate,
    TaskPage,
    ImportOutcome,
    SkippedRow,
    RowError,
    DedupeStrategy,
)
from .normalizer import (
    parse_due_date,
    parse_numeric_date,
    normalize_header,
    normalize_title,
)
from .locator import SourceLocator, locate
from .fetcher import SheetFetcher, parse_csv
from .mapper import ColumnIndex, build_column_index, map_row, map_rows
from .deduplicator import TitleDeduplicator

__all__ = [
    "CandidateTask",
    "StoredTask",
    "TaskUpdate",
    "TaskPage",
    "ImportOutcome",
    "SkippedRow",
    "RowError",
    "DedupeStrategy",
    "parse_due_date",
    "parse_numeric_date",
    "normalize_header",
    "normalize_title",
    "SourceLocator",
    "locate",
    "SheetFetcher",
    "parse_csv",
    "ColumnIndex",
    "build_column_index",
    "map_row",
    "map_rows",
    "TitleDeduplicator",
]
