"""Type definitions for content scanning results."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AnalysisStatus(str, Enum):
    """How an analysis step ended."""

    COMPLETE = "complete"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class _ResultModel(BaseModel):
    """Immutable result with camelCase aliases on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    status: AnalysisStatus = AnalysisStatus.COMPLETE
    error: str | None = None


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded raster, row-major, channels interleaved and RGB-first."""

    data: bytes
    width: int
    height: int
    channels: int = 3

    def __post_init__(self) -> None:
        if self.channels < 3:
            raise ValueError(f"Expected at least 3 channels, got {self.channels}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")


class SkinAnalysisResult(_ResultModel):
    """Verdict of the skin-tone heuristic."""

    is_explicit: bool = False
    skin_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @classmethod
    def failed(cls, error: str | None = None) -> "SkinAnalysisResult":
        return cls(status=AnalysisStatus.FAILED, error=error)


class TextAnalysisResult(_ResultModel):
    """Verdict of the keyword classifier over OCR text."""

    has_explicit_text: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    detected_words: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()
    extracted_text: str = ""

    @classmethod
    def empty(
        cls,
        status: AnalysisStatus = AnalysisStatus.COMPLETE,
        error: str | None = None,
    ) -> "TextAnalysisResult":
        """All-empty result, used both for blank text and for degraded OCR."""
        return cls(status=status, error=error)

    @property
    def is_degraded(self) -> bool:
        return self.status in (AnalysisStatus.TIMED_OUT, AnalysisStatus.FAILED)


class ImageAnalysisDetail(_ResultModel):
    """Combined skin and text verdict for a single image URL."""

    url: str
    is_explicit: bool = False
    skin_percentage: float = 0.0
    confidence: float = 0.0
    text_analysis: TextAnalysisResult = Field(default_factory=TextAnalysisResult.empty)

    @classmethod
    def failed(cls, url: str, error: str | None = None) -> "ImageAnalysisDetail":
        return cls(
            url=url,
            status=AnalysisStatus.FAILED,
            error=error,
            text_analysis=TextAnalysisResult.empty(AnalysisStatus.FAILED, error),
        )

    @property
    def is_degraded(self) -> bool:
        """True when the verdict was not fully verified (skin or OCR unavailable)."""
        return self.status != AnalysisStatus.COMPLETE or self.text_analysis.is_degraded


class ExplicitContentAnalysis(_ResultModel):
    """Aggregated verdict over an ordered batch of image URLs."""

    has_explicit_content: bool = False
    confidence: float = 0.0
    details: tuple[ImageAnalysisDetail, ...] = ()
    has_explicit_text: bool = False
    text_confidence: float = 0.0
    detected_categories: frozenset[str] = frozenset()

    @property
    def degraded_urls(self) -> list[str]:
        """URLs whose analysis was not fully verified, in input order."""
        return [detail.url for detail in self.details if detail.is_degraded]
