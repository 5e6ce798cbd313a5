"""Shared fixtures for importer tests."""

from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from task_importer.config.loader import Settings
from task_importer.store.sqlite import SqliteTaskStore


SHEET_URL = "https://docs.google.com/spreadsheets/d/1AbC-dEf_123/edit#gid=0"
SHEET_ID = "1AbC-dEf_123"


def make_transport(
    body: str = "",
    status: int = 200,
    content_type: str = "text/csv; charset=utf-8",
    on_request: Optional[Callable[[httpx.Request], None]] = None,
) -> httpx.MockTransport:
    """Mock transport answering every request with the same response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if on_request:
            on_request(request)
        return httpx.Response(
            status,
            content=body.encode("utf-8"),
            headers={"content-type": content_type},
        )

    return httpx.MockTransport(handler)


@pytest.fixture()
def transport_factory():
    """Factory for mock transports, see make_transport()."""
    return make_transport


@pytest.fixture()
def sheet_url() -> str:
    return SHEET_URL


@pytest.fixture()
def store(tmp_path: Path) -> SqliteTaskStore:
    """Fresh SQLite task store per test."""
    return SqliteTaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def settings() -> Settings:
    """Settings with a single fetch attempt so failures are immediate."""
    return Settings(max_retries=1, fetch_timeout=5.0)
