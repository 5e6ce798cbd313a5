"""
Async HTTP client with bounded timeout and retries.

Built on httpx with:
- Request timeout (expiry surfaces as httpx.TimeoutException)
- Exponential backoff retry on timeouts and network errors
- Injectable transport for offline tests
"""

from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from task_importer import __version__

logger = structlog.get_logger(__name__)


USER_AGENT = f"task-importer/{__version__}"

RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.NetworkError)


class HttpClient:
    """
    Async HTTP client with timeout and retries.

    Usage:
        async with HttpClient(timeout=10.0) as client:
            text = await client.get_text("https://example.com/export?format=csv")
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum attempts for retryable errors
            backoff: Exponential backoff multiplier in seconds (0 disables waiting)
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff = backoff
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _do_request(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> httpx.Response:
        """Execute HTTP request with retry."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        response = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff, min=self.backoff, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.warning("http_retry", url=url, attempt=attempt_number)
                response = await self._client.request(method, url, **kwargs)
                response.raise_for_status()

        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        GET request.

        Raises:
            httpx.HTTPStatusError: On non-2xx response
            httpx.TimeoutException: When every attempt timed out
            httpx.TransportError: On other transport failures
        """
        logger.debug("http_get", url=url)
        return await self._do_request("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs) -> str:
        """GET request returning text content."""
        response = await self.get(url, **kwargs)
        return response.text
