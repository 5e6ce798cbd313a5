"""
Spreadsheet URL validation and identifier extraction.

Accepts share/edit links (/spreadsheets/d/<id>/edit) and links to
sheets published to the web (/spreadsheets/d/e/<token>/pubhtml).
"""

import re
from typing import Optional
from urllib.parse import urlparse

import structlog

from task_importer.core.models import ResourceId
from task_importer.exceptions import InvalidInput

logger = structlog.get_logger(__name__)


DEFAULT_SHEETS_HOST = "docs.google.com"

PUBLISHED_ID_PATTERN = re.compile(r"/spreadsheets/d/e/([A-Za-z0-9_-]+)")
SHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([A-Za-z0-9_-]+)")

# Hostname labels: letters, digits, hyphens; at least one dot
HOSTNAME_PATTERN = re.compile(
    r"^(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$"
)


class SourceLocator:
    """
    Extracts the resource identifier from a spreadsheet URL.

    Usage:
        locator = SourceLocator()
        sheet_id = locator.locate("https://docs.google.com/spreadsheets/d/abc123/edit")
    """

    def __init__(self, host: str = DEFAULT_SHEETS_HOST):
        """
        Initialize locator.

        Args:
            host: Expected spreadsheet host
        """
        self.host = host.lower()

    def locate(self, url: Optional[str]) -> ResourceId:
        """
        Validate a URL and extract the spreadsheet identifier.

        Args:
            url: Spreadsheet URL as entered by the user

        Returns:
            Resource identifier ("<id>" or "e/<token>" for published sheets)

        Raises:
            InvalidInput: If the URL is missing, malformed, on another host,
                or has no identifier in its path
        """
        if not url or not isinstance(url, str) or not url.strip():
            raise InvalidInput("Google Sheet URL is required")

        parsed = self._parse_url(url.strip())
        if parsed is None:
            raise InvalidInput(f"Invalid Google Sheet URL: {url}")

        hostname = (parsed.hostname or "").lower()
        if hostname != self.host or not parsed.path.startswith("/spreadsheets"):
            raise InvalidInput(f"Not a Google Sheets URL: {url}")

        match = PUBLISHED_ID_PATTERN.search(parsed.path)
        if match:
            return f"e/{match.group(1)}"

        match = SHEET_ID_PATTERN.search(parsed.path)
        if match:
            return match.group(1)

        raise InvalidInput(f"No spreadsheet identifier found in URL: {url}")

    def try_locate(self, url: Optional[str]) -> Optional[ResourceId]:
        """Like locate(), but returns None instead of raising."""
        try:
            return self.locate(url)
        except InvalidInput as e:
            logger.debug("url_rejected", url=url, reason=str(e))
            return None

    @staticmethod
    def _parse_url(url: str):
        """Parse a URL, allowing a missing scheme. Returns None if invalid."""
        if any(ch.isspace() for ch in url):
            return None

        if "://" not in url:
            url = f"https://{url}"

        try:
            parsed = urlparse(url)
            # Accessing port validates it
            parsed.port
        except ValueError:
            return None

        if parsed.scheme not in ("http", "https"):
            return None

        if not parsed.hostname or not HOSTNAME_PATTERN.match(parsed.hostname):
            return None

        return parsed


def locate(url: Optional[str], host: str = DEFAULT_SHEETS_HOST) -> ResourceId:
    """Convenience wrapper around SourceLocator.locate()."""
    return SourceLocator(host).locate(url)
