"""Lazily created httpx client shared by the HTTP collaborators.

Every transport problem (refused connection, timeout, non-2xx status) is
re-raised as the owner's ContentScanError subclass, tagged with the image
URL being analyzed, so callers only ever catch one error type.
"""

import logging
from typing import Any, Awaitable, Callable

import httpx

from content_scan.errors import ContentScanError

from .async_context import AsyncContextManager

logger = logging.getLogger(__name__)

# Error bodies from OCR services can be whole HTML pages
MAX_ERROR_BODY = 200

_shutdown_hooks: list[tuple[str, Callable[[], Awaitable[None]]]] = []


def register_cleanup(name: str, closer: Callable[[], Awaitable[None]]) -> None:
    """Run closer from cleanup_all_clients() at shutdown."""
    _shutdown_hooks.append((name, closer))


async def cleanup_all_clients() -> None:
    """Run every registered closer. Errors are logged, not raised."""
    for name, closer in _shutdown_hooks:
        try:
            await closer()
        except Exception as e:
            logger.warning(f"Error closing {name}: {e}")


class BaseAsyncHttpClient(AsyncContextManager):
    """httpx.AsyncClient opened on first use and reopened after close().

    Subclasses set error_class and call request().
    """

    error_class: type[ContentScanError] = ContentScanError

    def __init__(
        self,
        base_url: str = "",
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def request(
        self, method: str, path: str, *, image_url: str, **kwargs: Any
    ) -> httpx.Response:
        """Send a request on behalf of image_url and return a 2xx response.

        Raises:
            error_class: connection failure, timeout or error status
        """
        target = f"{self.base_url}{path}"
        try:
            response = await self._get_client().request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.ConnectError as e:
            message = f"Connection failed: {e}"
        except httpx.TimeoutException as e:
            message = f"Request timeout: {e}"
        except httpx.HTTPStatusError as e:
            body = e.response.text[:MAX_ERROR_BODY]
            message = f"HTTP {e.response.status_code}: {body}".rstrip(": ")
        except httpx.HTTPError as e:
            message = f"Request failed: {e}"

        logger.warning(f"{method} {target} failed: {message}")
        raise self.error_class(message, url=image_url)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
