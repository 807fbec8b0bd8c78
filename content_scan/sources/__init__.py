"""Image and OCR collaborators."""

from .base import ImageSource, OcrEngine
from .http_image import HttpImageSource, decode_image
from .ocr_client import HttpOcrClient

__all__ = [
    "HttpImageSource",
    "HttpOcrClient",
    "ImageSource",
    "OcrEngine",
    "decode_image",
]
