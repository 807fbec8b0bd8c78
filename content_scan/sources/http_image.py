"""Image source that downloads over HTTP and decodes with Pillow."""

import asyncio
import io
import logging

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError

from content_scan.config import ScanConfig, get_scan_config
from content_scan.errors import DecodeFailure
from content_scan.types import PixelBuffer
from content_scan.utils.http_client import BaseAsyncHttpClient

from .base import ImageSource

logger = logging.getLogger(__name__)


def decode_image(content: bytes, max_side: int) -> PixelBuffer:
    """Decode image bytes to an RGB buffer no larger than max_side x max_side.

    Larger images are centre-cropped to fit the box; smaller ones keep their size.
    """
    try:
        with Image.open(io.BytesIO(content)) as image:
            image = ImageOps.exif_transpose(image).convert("RGB")
            width, height = image.size
            if width > max_side or height > max_side:
                image = ImageOps.fit(image, (min(width, max_side), min(height, max_side)))
            return PixelBuffer(
                data=image.tobytes(),
                width=image.width,
                height=image.height,
                channels=3,
            )
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Could not decode image: {e}") from e


class HttpImageSource(BaseAsyncHttpClient, ImageSource):
    """Downloads images with httpx and decodes them off the event loop."""

    error_class = DecodeFailure

    def __init__(
        self,
        config: ScanConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config or get_scan_config()
        super().__init__(timeout=self._config.image_timeout, transport=transport)

    async def load(self, url: str) -> PixelBuffer:
        response = await self.request("GET", url, image_url=url)

        try:
            buffer = await asyncio.to_thread(
                decode_image, response.content, self._config.image_max_side
            )
        except DecodeFailure as e:
            raise DecodeFailure(e.message, url=url) from e

        logger.debug(f"Decoded {url} to {buffer.width}x{buffer.height}")
        return buffer
