"""
Exceptions raised by the import pipeline.

Fatal errors abort an import before any row is persisted:
- InvalidInput: URL is not a spreadsheet URL
- SourceUnavailable: fetch failed (network, timeout, non-2xx)
- MalformedSource: fetched text is not usable CSV
- SchemaError: header row has no Title column

Per-row errors are caught by the importer and reported in the outcome:
- ValidationError: record rejected by the task store
- TaskStoreError: storage write failed
"""


class TaskImportError(Exception):
    """Base class for all task importer errors."""

    pass


class InvalidInput(TaskImportError):
    """Raised when an import URL is missing, malformed or not a spreadsheet URL."""

    pass


class SourceUnavailable(TaskImportError):
    """Raised when the spreadsheet cannot be retrieved."""

    pass


class MalformedSource(TaskImportError):
    """Raised when the retrieved text cannot be parsed as tabular data."""

    pass


class SchemaError(TaskImportError):
    """Raised when the header row lacks a required column."""

    pass


class ValidationError(TaskImportError):
    """Raised when a task record fails store validation."""

    pass


class TaskStoreError(TaskImportError):
    """Raised when the task store fails to read or write."""

    pass
