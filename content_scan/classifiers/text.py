"""Keyword classifier for text extracted from images."""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

from content_scan.types import AnalysisStatus, TextAnalysisResult

from .keywords import EXPLICIT_KEYWORDS

logger = logging.getLogger(__name__)

MATCH_WEIGHT = 0.3
EXPLICIT_THRESHOLD = 0.3

_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE = re.compile(r"\s+", re.ASCII)


@dataclass(frozen=True)
class KeywordMatch:
    """Keyword hits in one piece of text."""

    detected_words: tuple[str, ...]
    categories: tuple[str, ...]
    match_count: int

    @property
    def confidence(self) -> float:
        return min(self.match_count * MATCH_WEIGHT, 1.0)


def normalize_text(text: str) -> str:
    """Lower-case, replace punctuation with spaces, collapse whitespace."""
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE | re.ASCII)


def match_keywords(text: str) -> KeywordMatch:
    """Find catalog keywords in text.

    A keyword hits on a whole-word match or on plain substring containment,
    so "sex" also hits inside "sexual". Every (category, keyword) hit adds to
    match_count; detected_words is deduplicated in first-hit order.
    """
    normalized = normalize_text(text)
    detected: dict[str, None] = {}
    categories: dict[str, None] = {}
    match_count = 0

    for category, keywords in EXPLICIT_KEYWORDS.items():
        for keyword in keywords:
            if _keyword_pattern(keyword).search(normalized) or keyword in normalized:
                detected[keyword] = None
                categories[category] = None
                match_count += 1

    return KeywordMatch(
        detected_words=tuple(detected),
        categories=tuple(categories),
        match_count=match_count,
    )


def classify_text(text: str) -> TextAnalysisResult:
    """Classify extracted text against the keyword catalog. Never raises."""
    try:
        extracted = (text or "").strip()
        if not extracted:
            return TextAnalysisResult.empty()

        match = match_keywords(extracted)
        confidence = match.confidence
        result = TextAnalysisResult(
            has_explicit_text=bool(match.detected_words) and confidence > EXPLICIT_THRESHOLD,
            confidence=confidence,
            detected_words=frozenset(match.detected_words),
            categories=frozenset(match.categories),
            extracted_text=extracted,
        )
        if match.match_count:
            logger.debug(
                f"Text matched {match.match_count} keywords in {sorted(result.categories)}"
            )
        return result
    except Exception as e:
        logger.warning(f"Text classification failed: {e}")
        return TextAnalysisResult.empty(AnalysisStatus.FAILED, str(e))
