"""Content scan service: owns caches, collaborators and analyzers."""

import logging
import time
from typing import Any, Callable, Sequence

from content_scan.analysis import (
    BATCH_CACHE_PREFIX,
    IMAGE_CACHE_PREFIX,
    BatchAnalyzer,
    ImageAnalyzer,
)
from content_scan.cache import CacheSweeper, ResultCache
from content_scan.classifiers import classify_skin, classify_text
from content_scan.config import ScanConfig, get_scan_config
from content_scan.sources import HttpImageSource, HttpOcrClient, ImageSource, OcrEngine
from content_scan.types import (
    ExplicitContentAnalysis,
    ImageAnalysisDetail,
    PixelBuffer,
    SkinAnalysisResult,
    TextAnalysisResult,
)
from content_scan.utils.async_context import AsyncContextManager
from content_scan.utils.http_client import register_cleanup

logger = logging.getLogger(__name__)


class ContentScanService(AsyncContextManager):
    """Explicit-content scanning for image URLs.

    One cache per result type: image details keyed "image-analysis:<url>",
    batch verdicts keyed "batch-image-analysis:<url>,<url>,...". Any other
    key passed to set_cache/get_cache lands in general_cache.

    Usage:
        async with ContentScanService() as service:
            verdict = await service.analyze_images_batch(urls)
            if verdict.has_explicit_content:
                ...
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        image_source: ImageSource | None = None,
        ocr_engine: OcrEngine | None = None,
        timer: Callable[[], float] = time.time,
    ):
        self._config = config or get_scan_config()
        self._image_source = image_source or HttpImageSource(self._config)
        self._ocr_engine = ocr_engine or HttpOcrClient(self._config)

        self.image_cache: ResultCache[ImageAnalysisDetail] = ResultCache(
            "image-analysis", timer=timer
        )
        self.batch_cache: ResultCache[ExplicitContentAnalysis] = ResultCache(
            "batch-image-analysis", timer=timer
        )
        self.general_cache: ResultCache[Any] = ResultCache("general", timer=timer)

        self._image_analyzer = ImageAnalyzer(
            self._image_source, self._ocr_engine, self.image_cache, self._config
        )
        self._batch_analyzer = BatchAnalyzer(self._image_analyzer, self.batch_cache, self._config)
        self._sweeper: CacheSweeper | None = None

    @property
    def config(self) -> ScanConfig:
        return self._config

    # -----------------------------------------------------------------------
    # Cache operations
    # -----------------------------------------------------------------------

    def _cache_for(self, key: str) -> ResultCache:
        if key.startswith(BATCH_CACHE_PREFIX):
            return self.batch_cache
        if key.startswith(IMAGE_CACHE_PREFIX):
            return self.image_cache
        return self.general_cache

    @property
    def caches(self) -> list[ResultCache]:
        return [self.image_cache, self.batch_cache, self.general_cache]

    def set_cache(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value in the cache that owns key's prefix (general_cache otherwise)."""
        self._cache_for(key).set(key, value, ttl_seconds)

    def get_cache(self, key: str) -> Any | None:
        """Read key from the cache that owns its prefix."""
        return self._cache_for(key).get(key)

    def clear_expired_cache(self) -> int:
        """Sweep expired entries from every cache."""
        return sum(cache.clear_expired() for cache in self.caches)

    def clear_cache(self) -> None:
        """Drop every cached result."""
        for cache in self.caches:
            cache.clear()

    def start_sweeper(self, interval: float | None = None) -> CacheSweeper:
        """Start periodic expiry sweeps (requires a running event loop)."""
        if self._sweeper is None:
            self._sweeper = CacheSweeper(
                self.caches,
                interval=interval or self._config.sweep_interval,
            )
        if not self._sweeper.running:
            self._sweeper.start()
            logger.info(f"Cache sweeper started (every {self._sweeper.interval}s)")
        return self._sweeper

    # -----------------------------------------------------------------------
    # Analysis
    # -----------------------------------------------------------------------

    async def analyze_image_fast(self, url: str) -> ImageAnalysisDetail:
        return await self._image_analyzer.analyze(url)

    async def analyze_images_batch(self, urls: Sequence[str]) -> ExplicitContentAnalysis:
        return await self._batch_analyzer.analyze(urls)

    async def analyze_image_skin(self, url: str) -> SkinAnalysisResult:
        """Skin heuristic only (uncached)."""
        return await self._image_analyzer.analyze_skin(url)

    async def analyze_image_text(self, url: str) -> TextAnalysisResult:
        """OCR text classification only (uncached, no time budget)."""
        return await self._image_analyzer.analyze_text(url)

    async def analyze_image_texts(self, urls: Sequence[str]) -> list[TextAnalysisResult]:
        return await self._batch_analyzer.analyze_texts(urls)

    @staticmethod
    def classify_skin(buffer: PixelBuffer) -> SkinAnalysisResult:
        return classify_skin(buffer)

    @staticmethod
    def classify_text(text: str) -> TextAnalysisResult:
        return classify_text(text)

    async def close(self) -> None:
        """Stop the sweeper and close collaborator connections."""
        if self._sweeper is not None:
            await self._sweeper.close()
        await self._image_source.close()
        await self._ocr_engine.close()

    async def __aenter__(self):
        if self._config.sweep_interval > 0:
            self.start_sweeper()
        return self


# Module singleton
_service: ContentScanService | None = None


def get_scan_service() -> ContentScanService:
    """Get global ContentScanService instance."""
    global _service
    if _service is None:
        _service = ContentScanService()
        register_cleanup("ContentScanService", _close_scan_service)
    return _service


async def _close_scan_service() -> None:
    """Close the global ContentScanService."""
    global _service
    if _service:
        await _service.close()
        _service = None
