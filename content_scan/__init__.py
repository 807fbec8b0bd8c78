"""Explicit content detection for images.

Combines a skin-tone pixel heuristic with keyword analysis of OCR text, with
per-URL and per-batch result caching.

Example:
    from content_scan import analyze_images_batch

    verdict = await analyze_images_batch(["https://example.com/a.jpg"])
    print(verdict.has_explicit_content, verdict.confidence)

    # Explicit instance with your own collaborators and config
    async with ContentScanService(ScanConfig(batch_concurrency=4)) as service:
        detail = await service.analyze_image_fast("https://example.com/a.jpg")

Environment Variables:
    SCAN_OCR_BASE_URL: OCR service endpoint
    SCAN_OCR_TIMEOUT_MS: OCR budget per image (default 3000)
    See content_scan.config.ScanConfig for the full list.
"""

from typing import Sequence

from .cache import CacheEntry, CacheSweeper, ResultCache
from .classifiers import classify_skin, classify_text
from .config import ScanConfig, configure_logging, get_scan_config
from .errors import (
    ClassifierFault,
    ContentScanError,
    DecodeFailure,
    OcrFailure,
    OcrTimeout,
)
from .service import ContentScanService, get_scan_service
from .types import (
    AnalysisStatus,
    ExplicitContentAnalysis,
    ImageAnalysisDetail,
    PixelBuffer,
    SkinAnalysisResult,
    TextAnalysisResult,
)


async def analyze_image_fast(url: str) -> ImageAnalysisDetail:
    """Analyze one image URL with the default service."""
    return await get_scan_service().analyze_image_fast(url)


async def analyze_images_batch(urls: Sequence[str]) -> ExplicitContentAnalysis:
    """Analyze several image URLs with the default service."""
    return await get_scan_service().analyze_images_batch(urls)


__all__ = [
    # Main functions
    "analyze_image_fast",
    "analyze_images_batch",
    "classify_skin",
    "classify_text",
    # Service
    "ContentScanService",
    "get_scan_service",
    # Cache
    "CacheEntry",
    "CacheSweeper",
    "ResultCache",
    # Types
    "AnalysisStatus",
    "ExplicitContentAnalysis",
    "ImageAnalysisDetail",
    "PixelBuffer",
    "SkinAnalysisResult",
    "TextAnalysisResult",
    # Config
    "ScanConfig",
    "configure_logging",
    "get_scan_config",
    # Errors
    "ClassifierFault",
    "ContentScanError",
    "DecodeFailure",
    "OcrFailure",
    "OcrTimeout",
]
