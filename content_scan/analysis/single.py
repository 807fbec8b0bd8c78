"""Single-image analysis: skin heuristic first, OCR within a time budget."""

import asyncio
import logging

from content_scan.cache import ResultCache
from content_scan.classifiers import classify_skin, classify_text
from content_scan.config import ScanConfig, get_scan_config
from content_scan.errors import OcrTimeout
from content_scan.sources import ImageSource, OcrEngine
from content_scan.types import (
    AnalysisStatus,
    ImageAnalysisDetail,
    SkinAnalysisResult,
    TextAnalysisResult,
)

logger = logging.getLogger(__name__)

IMAGE_CACHE_PREFIX = "image-analysis:"

# Skin verdicts above this confidence skip OCR entirely
SKIP_OCR_CONFIDENCE = 0.7
# OCR text only flips the verdict above this confidence
TEXT_EXPLICIT_CONFIDENCE = 0.4
TEXT_CONFIDENCE_WEIGHT = 0.8


def image_cache_key(url: str) -> str:
    return f"{IMAGE_CACHE_PREFIX}{url}"


def combine_results(
    url: str, skin: SkinAnalysisResult, text: TextAnalysisResult
) -> ImageAnalysisDetail:
    """Merge skin and text verdicts into one detail."""
    return ImageAnalysisDetail(
        url=url,
        is_explicit=skin.is_explicit
        or (text.has_explicit_text and text.confidence > TEXT_EXPLICIT_CONFIDENCE),
        skin_percentage=skin.skin_percentage,
        confidence=max(skin.confidence, text.confidence * TEXT_CONFIDENCE_WEIGHT),
        text_analysis=text,
        status=skin.status,
        error=skin.error,
    )


class ImageAnalyzer:
    """Analyzes one image URL, memoizing results per URL.

    Usage:
        analyzer = ImageAnalyzer(HttpImageSource(), HttpOcrClient(), ResultCache("images"))
        detail = await analyzer.analyze("https://example.com/photo.jpg")
    """

    def __init__(
        self,
        image_source: ImageSource,
        ocr_engine: OcrEngine,
        cache: ResultCache[ImageAnalysisDetail],
        config: ScanConfig | None = None,
    ):
        self._image_source = image_source
        self._ocr_engine = ocr_engine
        self._cache = cache
        self._config = config or get_scan_config()

    async def analyze_skin(self, url: str) -> SkinAnalysisResult:
        """Fetch, decode and skin-classify url. Failures degrade, never raise."""
        try:
            buffer = await self._image_source.load(url)
        except Exception as e:
            logger.warning(f"Image analysis failed for {url}: {e}")
            return SkinAnalysisResult.failed(str(e))
        return classify_skin(buffer)

    async def analyze_text(self, url: str) -> TextAnalysisResult:
        """OCR url and classify the text, without a time budget.

        OCR failures degrade to an empty failed result.
        """
        try:
            text = await self._ocr_engine.extract_text(url)
        except Exception as e:
            logger.warning(f"OCR analysis failed for {url}: {e}")
            return TextAnalysisResult.empty(AnalysisStatus.FAILED, str(e))
        return classify_text(text)

    async def _analyze_text_within_budget(self, url: str) -> TextAnalysisResult:
        timeout = self._config.ocr_timeout
        try:
            text = await asyncio.wait_for(self._ocr_engine.extract_text(url), timeout=timeout)
        except asyncio.TimeoutError:
            error = OcrTimeout(f"OCR exceeded {timeout * 1000:.0f}ms", url=url)
            logger.warning(f"OCR timeout for {url}, using skin analysis only")
            return TextAnalysisResult.empty(AnalysisStatus.TIMED_OUT, error.message)
        except Exception as e:
            logger.warning(f"OCR failed for {url}, using skin analysis only: {e}")
            return TextAnalysisResult.empty(AnalysisStatus.FAILED, str(e))
        return classify_text(text)

    async def _analyze_uncached(self, url: str) -> ImageAnalysisDetail:
        skin = await self.analyze_skin(url)

        if skin.is_explicit and skin.confidence > SKIP_OCR_CONFIDENCE:
            logger.info(f"High confidence skin detection, skipping OCR for: {url}")
            return combine_results(url, skin, TextAnalysisResult.empty(AnalysisStatus.SKIPPED))

        text = await self._analyze_text_within_budget(url)
        return combine_results(url, skin, text)

    async def analyze(self, url: str) -> ImageAnalysisDetail:
        """Analyze url, serving repeat calls from the cache.

        Returns:
            ImageAnalysisDetail; a zeroed failed detail if anything
            unexpected goes wrong (cached briefly so a flaky collaborator
            is not hammered).
        """
        key = image_cache_key(url)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for image analysis: {url}")
            return cached

        logger.info(f"Starting fast analysis for: {url}")
        try:
            detail = await self._analyze_uncached(url)
        except Exception as e:
            logger.warning(f"Fast analysis failed for {url}: {e}")
            detail = ImageAnalysisDetail.failed(url, str(e))
            self._cache.set(key, detail, self._config.failure_ttl)
            return detail

        self._cache.set(key, detail, self._config.result_ttl)
        return detail
