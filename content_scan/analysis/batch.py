"""Batch analysis over many image URLs with bounded concurrency."""

import logging
from typing import Sequence

from content_scan.cache import ResultCache
from content_scan.config import ScanConfig, get_scan_config
from content_scan.types import (
    AnalysisStatus,
    ExplicitContentAnalysis,
    ImageAnalysisDetail,
    TextAnalysisResult,
)
from content_scan.utils.async_utils import run_with_concurrency

from .single import ImageAnalyzer

logger = logging.getLogger(__name__)

BATCH_CACHE_PREFIX = "batch-image-analysis:"

# Text verdicts count towards the batch only above this confidence
TEXT_EXPLICIT_CONFIDENCE = 0.3


def batch_cache_key(urls: Sequence[str]) -> str:
    """Order-sensitive key: permutations of the same URLs are distinct entries."""
    return f"{BATCH_CACHE_PREFIX}{','.join(urls)}"


def aggregate_details(details: Sequence[ImageAnalysisDetail]) -> ExplicitContentAnalysis:
    """Fold per-image details into one batch verdict, keeping input order."""
    explicit_images = [detail for detail in details if detail.is_explicit]
    explicit_texts = [
        detail
        for detail in details
        if detail.text_analysis.has_explicit_text
        and detail.text_analysis.confidence > TEXT_EXPLICIT_CONFIDENCE
    ]

    categories: set[str] = set()
    for detail in details:
        categories.update(detail.text_analysis.categories)

    overall_confidence = max((detail.confidence for detail in explicit_images), default=0.0)
    text_confidence = max(
        (detail.text_analysis.confidence for detail in explicit_texts), default=0.0
    )

    return ExplicitContentAnalysis(
        has_explicit_content=bool(explicit_images) or bool(explicit_texts),
        confidence=max(overall_confidence, text_confidence),
        details=tuple(details),
        has_explicit_text=bool(explicit_texts),
        text_confidence=text_confidence,
        detected_categories=frozenset(categories),
    )


class BatchAnalyzer:
    """Runs ImageAnalyzer over URL lists, at most batch_concurrency at a time."""

    def __init__(
        self,
        image_analyzer: ImageAnalyzer,
        cache: ResultCache[ExplicitContentAnalysis],
        config: ScanConfig | None = None,
    ):
        self._image_analyzer = image_analyzer
        self._cache = cache
        self._config = config or get_scan_config()

    @property
    def concurrency(self) -> int:
        return self._config.batch_concurrency

    async def analyze(self, urls: Sequence[str]) -> ExplicitContentAnalysis:
        """Analyze every URL and aggregate into one verdict (cached per URL list)."""
        urls = list(urls)
        key = batch_cache_key(urls)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for batch image analysis")
            return cached

        logger.info(
            f"Analyzing {len(urls)} images (max {self.concurrency} concurrent)..."
        )
        outcomes = await run_with_concurrency(
            urls, self._image_analyzer.analyze, max_concurrent=self.concurrency
        )

        details = []
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Analysis task failed for {url}: {outcome}")
                outcome = ImageAnalysisDetail.failed(url, str(outcome))
            details.append(outcome)

        result = aggregate_details(details)
        degraded = len(result.degraded_urls)
        logger.info(
            f"Batch complete: {len(details)} images, explicit={result.has_explicit_content}, "
            f"confidence={result.confidence:.2f}, degraded={degraded}"
        )

        self._cache.set(key, result, self._config.result_ttl)
        return result

    async def analyze_texts(self, urls: Sequence[str]) -> list[TextAnalysisResult]:
        """OCR and text-classify every URL (no time budget, not cached)."""
        outcomes = await run_with_concurrency(
            list(urls), self._image_analyzer.analyze_text, max_concurrent=self.concurrency
        )
        results = []
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Text analysis task failed for {url}: {outcome}")
                outcome = TextAnalysisResult.empty(AnalysisStatus.FAILED, str(outcome))
            results.append(outcome)
        return results
