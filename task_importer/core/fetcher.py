"""
Spreadsheet fetching and CSV parsing.

Downloads a sheet through its CSV export endpoint and turns the
text into rows of trimmed string cells.
"""

import asyncio
import csv
import io
from typing import Optional

import httpx
import structlog

from task_importer.core.http_client import HttpClient
from task_importer.core.locator import DEFAULT_SHEETS_HOST
from task_importer.core.models import RawRow, ResourceId
from task_importer.exceptions import MalformedSource, SourceUnavailable

logger = structlog.get_logger(__name__)


EXPORT_URL_TEMPLATE = "https://{host}/spreadsheets/d/{sheet_id}/export?format=csv"
PUBLISH_URL_TEMPLATE = "https://{host}/spreadsheets/d/e/{sheet_id}/pub?output=csv"

PUBLISHED_PREFIX = "e/"


def parse_csv(text: str) -> list[RawRow]:
    """
    Parse CSV text into rows.

    - Quoted fields may contain commas, quotes and newlines
    - Cell whitespace is trimmed
    - Empty lines (and lines with only blank cells) are skipped
    - Rows may have different widths

    Args:
        text: Raw CSV text

    Returns:
        List of rows, header first

    Raises:
        MalformedSource: If the text is not parseable CSV
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    rows: list[RawRow] = []
    try:
        reader = csv.reader(io.StringIO(text, newline=""))
        for row in reader:
            cells = [cell.strip() for cell in row]
            if not any(cells):
                continue
            rows.append(cells)
    except csv.Error as e:
        raise MalformedSource(f"Sheet data is not valid CSV: {e}") from e

    return rows


class SheetFetcher:
    """
    Fetches a spreadsheet as rows of cells.

    Usage:
        async with HttpClient() as client:
            rows = await SheetFetcher(client).fetch("abc123")
    """

    def __init__(
        self,
        http_client: HttpClient,
        host: str = DEFAULT_SHEETS_HOST,
        export_url_template: str = EXPORT_URL_TEMPLATE,
        publish_url_template: str = PUBLISH_URL_TEMPLATE,
        deadline: Optional[float] = None,
    ):
        """
        Initialize fetcher.

        Args:
            http_client: HTTP client inside its async context
            host: Spreadsheet host
            export_url_template: CSV export URL, with {host} and {sheet_id}
            publish_url_template: CSV URL for sheets published to the web
            deadline: Overall seconds allowed for the download, retries
                included (None for no limit)
        """
        self.http_client = http_client
        self.host = host
        self.export_url_template = export_url_template
        self.publish_url_template = publish_url_template
        self.deadline = deadline

    def export_url(self, resource_id: ResourceId) -> str:
        """Build the CSV export URL for a resource identifier."""
        if resource_id.startswith(PUBLISHED_PREFIX):
            return self.publish_url_template.format(
                host=self.host,
                sheet_id=resource_id[len(PUBLISHED_PREFIX):],
            )
        return self.export_url_template.format(host=self.host, sheet_id=resource_id)

    async def fetch_text(self, resource_id: ResourceId) -> str:
        """
        Download the raw CSV text of a sheet.

        Raises:
            SourceUnavailable: On network error, non-2xx status, or when the
                download outlives the deadline
            MalformedSource: If the server returned an HTML page instead of CSV
        """
        url = self.export_url(resource_id)
        logger.info("fetching_sheet", sheet_id=resource_id, url=url)

        try:
            response = await asyncio.wait_for(self.http_client.get(url), self.deadline)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("sheet_fetch_failed", sheet_id=resource_id, status=status)
            raise SourceUnavailable(
                f"Failed to fetch data from Google Sheet (HTTP {status})"
            ) from e
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error("sheet_fetch_timeout", sheet_id=resource_id)
            raise SourceUnavailable("Timed out fetching data from Google Sheet") from e
        except httpx.HTTPError as e:
            logger.error("sheet_fetch_failed", sheet_id=resource_id, error=str(e))
            raise SourceUnavailable(f"Failed to fetch data from Google Sheet: {e}") from e

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type.lower():
            # Private sheets answer with a sign-in page
            raise MalformedSource(
                "Google Sheet returned an HTML page; make sure the sheet is shared or published"
            )

        return response.text

    async def fetch(self, resource_id: ResourceId) -> list[RawRow]:
        """
        Fetch and parse a sheet.

        Args:
            resource_id: Identifier from SourceLocator

        Returns:
            Rows of trimmed cells, header row first

        Raises:
            SourceUnavailable: On transport failure
            MalformedSource: If the data is not usable CSV or is empty
        """
        text = await self.fetch_text(resource_id)
        rows = parse_csv(text)

        if not rows:
            raise MalformedSource("Google Sheet is empty")

        logger.info("sheet_fetched", sheet_id=resource_id, rows=len(rows))
        return rows
