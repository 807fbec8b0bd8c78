"""Single-image and batch orchestration."""

from .batch import BATCH_CACHE_PREFIX, BatchAnalyzer, aggregate_details, batch_cache_key
from .single import IMAGE_CACHE_PREFIX, ImageAnalyzer, combine_results, image_cache_key

__all__ = [
    "BATCH_CACHE_PREFIX",
    "IMAGE_CACHE_PREFIX",
    "BatchAnalyzer",
    "ImageAnalyzer",
    "aggregate_details",
    "batch_cache_key",
    "combine_results",
    "image_cache_key",
]
