"""Client for an HTTP OCR service.

Expected API:
    POST {base_url}/ocr  {"url": "...", "lang": "eng"}  ->  {"text": "..."}
"""

import logging

import httpx

from content_scan.config import ScanConfig, get_scan_config
from content_scan.errors import OcrFailure
from content_scan.utils.http_client import BaseAsyncHttpClient

from .base import OcrEngine

logger = logging.getLogger(__name__)


class HttpOcrClient(BaseAsyncHttpClient, OcrEngine):
    """OCR engine backed by a remote recognition service.

    The HTTP timeout is left to the caller's OCR budget; cancelling
    extract_text() aborts the in-flight request.
    """

    error_class = OcrFailure

    def __init__(
        self,
        config: ScanConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config or get_scan_config()
        super().__init__(base_url=self._config.ocr_base_url, timeout=None, transport=transport)

    async def extract_text(self, url: str) -> str:
        logger.debug(f"Starting OCR for {url}")
        response = await self.request(
            "POST",
            "/ocr",
            image_url=url,
            json={"url": url, "lang": self._config.ocr_language},
        )

        try:
            data = response.json()
        except ValueError as e:
            raise OcrFailure(f"Invalid OCR response: {e}", url=url) from e

        text = data.get("text") if isinstance(data, dict) else None
        if text is not None and not isinstance(text, str):
            raise OcrFailure(f"Unexpected OCR payload: {data!r}", url=url)
        return (text or "").strip()
