"""Abstract collaborators: where pixels and OCR text come from."""

from abc import ABC, abstractmethod

from content_scan.types import PixelBuffer


class ImageSource(ABC):
    """Fetches an image URL and decodes it to raw pixels."""

    @abstractmethod
    async def load(self, url: str) -> PixelBuffer:
        """Fetch and decode url.

        Raises:
            DecodeFailure: The image could not be fetched or decoded
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass


class OcrEngine(ABC):
    """Extracts text from the image behind a URL."""

    @abstractmethod
    async def extract_text(self, url: str) -> str:
        """Run OCR over url and return the (possibly empty) text.

        Must stay cancellable: callers enforce their time budget by
        cancelling this coroutine.

        Raises:
            OcrFailure: The OCR engine could not process the image
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass
