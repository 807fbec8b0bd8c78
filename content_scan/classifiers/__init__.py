"""Skin-tone and keyword classifiers."""

from .keywords import CATEGORIES, EXPLICIT_KEYWORDS
from .skin import SkinScan, classify_skin, is_skin_pixel, scan_pixels, score_scan, skin_mask
from .text import KeywordMatch, classify_text, match_keywords, normalize_text

__all__ = [
    "CATEGORIES",
    "EXPLICIT_KEYWORDS",
    "KeywordMatch",
    "SkinScan",
    "classify_skin",
    "classify_text",
    "is_skin_pixel",
    "match_keywords",
    "normalize_text",
    "scan_pixels",
    "score_scan",
    "skin_mask",
]
