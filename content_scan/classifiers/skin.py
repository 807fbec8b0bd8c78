"""Skin-tone heuristic for explicit image detection.

A pixel counts as skin when any of three classic colour-space rules fires
(RGB thresholds, normalised RGB ratios, HSV hue/saturation band). The scan
samples every 8th pixel and stops early once more than 35% of at least 101
samples are skin, so very skin-heavy images report a lower bound of their
coverage rather than an exact figure.
"""

import logging
from dataclasses import dataclass

import numpy as np

from content_scan.errors import ClassifierFault
from content_scan.types import PixelBuffer, SkinAnalysisResult

logger = logging.getLogger(__name__)

SAMPLE_STRIDE = 8
EARLY_EXIT_MIN_SAMPLES = 100
EARLY_EXIT_RATIO = 0.35

EXPLICIT_PERCENTAGE = 35.0
REGION_EXPLICIT_PERCENTAGE = 25.0
REGION_MIN_PIXELS = 30
REGION_MIN_PERCENTAGE = 15.0

# (lower bound exclusive, base confidence), checked top to bottom
CONFIDENCE_TIERS = ((40.0, 0.9), (30.0, 0.7), (20.0, 0.5))
BASE_CONFIDENCE = 0.3
REGION_BONUS = 0.2


@dataclass(frozen=True)
class SkinScan:
    """Raw counts from a sampled scan."""

    skin_pixels: int
    total_pixels: int
    coordinates: tuple[tuple[int, int], ...]

    @property
    def skin_percentage(self) -> float:
        if self.total_pixels == 0:
            return 0.0
        return self.skin_pixels / self.total_pixels * 100


def skin_mask(rgb: np.ndarray) -> np.ndarray:
    """Vectorised skin test over an (N, 3) array of RGB values."""
    rgb = np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    mx = rgb.max(axis=1)
    mn = rgb.min(axis=1)
    dif = mx - mn
    total = r + g + b

    rgb_rule = (
        (r > 95)
        & (g > 40)
        & (g < 100)
        & (b > 20)
        & (dif > 15)
        & (np.abs(r - g) > 15)
        & (r > g)
        & (r > b)
    )

    with np.errstate(divide="ignore", invalid="ignore"):
        nr = r / total
        ng = g / total
        total_sq = total * total
        norm_rule = ((nr / ng) > 1.185) & ((r * b) / total_sq > 0.107) & ((r * g) / total_sq > 0.112)

        hue = np.select(
            [dif == 0, mx == r, mx == g],
            [
                np.zeros_like(r),
                np.fmod((g - b) / dif, 6),
                (b - r) / dif + 2,
            ],
            default=(r - g) / dif + 4,
        )
        hue = hue * 60
        hue = np.where(hue < 0, hue + 360, hue)
        saturation = np.where(mx == 0, 0.0, 1 - 3 * (mn / total))

    hsv_rule = (hue > 0) & (hue < 35) & (saturation > 0.23) & (saturation < 0.68)

    # black pixels never count, whichever rule would say otherwise
    return (rgb_rule | norm_rule | hsv_rule) & (total != 0)


def is_skin_pixel(r: int, g: int, b: int) -> bool:
    """Scalar form of skin_mask."""
    return bool(skin_mask(np.array([[r, g, b]]))[0])


def scan_pixels(buffer: PixelBuffer) -> SkinScan:
    """Sample every SAMPLE_STRIDE-th pixel and count skin, with early exit."""
    channels = buffer.channels
    pixel_count = len(buffer.data) // channels
    if pixel_count == 0:
        return SkinScan(skin_pixels=0, total_pixels=0, coordinates=())

    pixels = np.frombuffer(buffer.data, dtype=np.uint8, count=pixel_count * channels)
    sampled = pixels.reshape(pixel_count, channels)[::SAMPLE_STRIDE, :3]
    mask = skin_mask(sampled)

    totals = np.arange(1, mask.size + 1)
    running_skin = np.cumsum(mask)
    exit_points = np.flatnonzero(
        (totals > EARLY_EXIT_MIN_SAMPLES) & (running_skin / totals > EARLY_EXIT_RATIO)
    )
    stop = int(exit_points[0]) + 1 if exit_points.size else mask.size

    skin_indices = np.flatnonzero(mask[:stop]) * SAMPLE_STRIDE
    coordinates = tuple(
        (int(index % buffer.width), int(index // buffer.width)) for index in skin_indices
    )
    return SkinScan(
        skin_pixels=len(coordinates),
        total_pixels=stop,
        coordinates=coordinates,
    )


def score_scan(scan: SkinScan) -> SkinAnalysisResult:
    """Turn scan counts into a verdict and confidence."""
    percentage = scan.skin_percentage
    has_large_regions = (
        len(scan.coordinates) > REGION_MIN_PIXELS and percentage > REGION_MIN_PERCENTAGE
    )

    is_explicit = percentage > EXPLICIT_PERCENTAGE or (
        percentage > REGION_EXPLICIT_PERCENTAGE and has_large_regions
    )

    confidence = next(
        (tier for bound, tier in CONFIDENCE_TIERS if percentage > bound), BASE_CONFIDENCE
    )
    if has_large_regions:
        confidence += REGION_BONUS
    confidence = min(max(confidence, 0.0), 1.0)

    return SkinAnalysisResult(
        is_explicit=is_explicit,
        skin_percentage=round(percentage, 2),
        confidence=round(confidence, 2),
    )


def classify_skin(buffer: PixelBuffer) -> SkinAnalysisResult:
    """Classify a decoded image by skin coverage. Never raises.

    Returns:
        SkinAnalysisResult; on any internal fault a failed result
        (not explicit, 0%, confidence 0).
    """
    try:
        try:
            scan = scan_pixels(buffer)
        except (ValueError, TypeError, IndexError) as e:
            raise ClassifierFault(f"Pixel scan failed: {e}") from e
        result = score_scan(scan)
        logger.debug(
            f"Skin scan: {scan.skin_pixels}/{scan.total_pixels} samples, "
            f"{result.skin_percentage}% (confidence {result.confidence})"
        )
        return result
    except Exception as e:
        logger.warning(f"Skin classification failed: {e}")
        return SkinAnalysisResult.failed(str(e))
