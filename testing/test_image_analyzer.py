"""Tests for single-image orchestration: short-circuit, OCR budget, caching."""

import asyncio
import time

import pytest

from conftest import SKIN_RGB, StubImageSource, StubOcrEngine, solid_buffer
from content_scan.analysis import ImageAnalyzer, combine_results, image_cache_key
from content_scan.cache import ResultCache
from content_scan.config import ScanConfig
from content_scan.types import (
    AnalysisStatus,
    ImageAnalysisDetail,
    SkinAnalysisResult,
    TextAnalysisResult,
)

URL = "http://img.test/a.jpg"


@pytest.fixture
def image_cache(clock) -> ResultCache[ImageAnalysisDetail]:
    return ResultCache("image-analysis", timer=clock)


@pytest.fixture
def analyzer(image_source, ocr_engine, image_cache, scan_config) -> ImageAnalyzer:
    return ImageAnalyzer(image_source, ocr_engine, image_cache, scan_config)


def test_cache_key():
    assert image_cache_key(URL) == "image-analysis:http://img.test/a.jpg"


class TestCombineResults:
    def test_confidence_is_max_of_skin_and_weighted_text(self):
        skin = SkinAnalysisResult(is_explicit=False, skin_percentage=10.0, confidence=0.3)
        text = TextAnalysisResult(has_explicit_text=True, confidence=0.6)
        detail = combine_results(URL, skin, text)

        assert detail.confidence == pytest.approx(0.48)
        assert detail.is_explicit

    def test_weak_text_does_not_flip_verdict(self):
        skin = SkinAnalysisResult(is_explicit=False, skin_percentage=10.0, confidence=0.3)
        text = TextAnalysisResult(has_explicit_text=True, confidence=0.4)
        assert not combine_results(URL, skin, text).is_explicit

    def test_skin_verdict_alone_is_enough(self):
        skin = SkinAnalysisResult(is_explicit=True, skin_percentage=36.0, confidence=0.7)
        detail = combine_results(URL, skin, TextAnalysisResult.empty())
        assert detail.is_explicit
        assert detail.confidence == 0.7
        assert detail.skin_percentage == 36.0


class TestShortCircuit:
    async def test_confident_skin_skips_ocr(self, analyzer, image_source, ocr_engine):
        image_source.buffers[URL] = solid_buffer(SKIN_RGB)

        detail = await analyzer.analyze(URL)

        assert ocr_engine.calls == []
        assert detail.is_explicit
        assert detail.confidence == 1.0
        assert detail.text_analysis.status == AnalysisStatus.SKIPPED
        assert detail.text_analysis.confidence == 0
        assert detail.text_analysis.detected_words == frozenset()
        assert not detail.is_degraded


class TestOcrPath:
    async def test_explicit_text_flips_verdict(self, analyzer, ocr_engine):
        ocr_engine.texts[URL] = "nude sexual"

        detail = await analyzer.analyze(URL)

        assert ocr_engine.calls == [URL]
        assert detail.is_explicit
        assert detail.skin_percentage == 0.0
        assert detail.text_analysis.categories == {"nudity", "sexual"}
        assert detail.confidence == pytest.approx(0.9 * 0.8)

    async def test_clean_image_and_text(self, analyzer, ocr_engine):
        ocr_engine.texts[URL] = "holiday photos"

        detail = await analyzer.analyze(URL)

        assert not detail.is_explicit
        assert detail.confidence == 0.3
        assert detail.text_analysis.extracted_text == "holiday photos"
        assert detail.status == AnalysisStatus.COMPLETE

    async def test_ocr_timeout_falls_back_and_cancels(self, analyzer, ocr_engine, scan_config):
        ocr_engine.texts[URL] = "nude nude nude"
        ocr_engine.delay = 5.0

        started = time.monotonic()
        detail = await analyzer.analyze(URL)
        elapsed = time.monotonic() - started

        assert elapsed < scan_config.ocr_timeout + 1.0
        assert detail.text_analysis.status == AnalysisStatus.TIMED_OUT
        assert detail.text_analysis.confidence == 0
        assert not detail.is_explicit
        assert detail.is_degraded
        assert ocr_engine.cancelled == [URL]

    async def test_ocr_failure_falls_back(self, analyzer, ocr_engine, ocr_failure):
        ocr_engine.failures[URL] = ocr_failure

        detail = await analyzer.analyze(URL)

        assert detail.text_analysis.status == AnalysisStatus.FAILED
        assert "refused" in detail.text_analysis.error
        assert detail.confidence == 0.3
        assert detail.is_degraded

    async def test_decode_failure_still_runs_ocr(
        self, analyzer, image_source, ocr_engine, decode_failure
    ):
        image_source.failures[URL] = decode_failure
        ocr_engine.texts[URL] = "xxx porn"

        detail = await analyzer.analyze(URL)

        assert detail.status == AnalysisStatus.FAILED
        assert detail.skin_percentage == 0.0
        assert detail.text_analysis.has_explicit_text
        assert detail.is_explicit


class TestCaching:
    async def test_second_call_served_from_cache(self, analyzer, image_source, ocr_engine):
        ocr_engine.texts[URL] = "blood"

        first = await analyzer.analyze(URL)
        second = await analyzer.analyze(URL)

        assert second is first
        assert second == first
        assert image_source.calls == [URL]
        assert ocr_engine.calls == [URL]

    async def test_result_expires_after_five_minutes(self, analyzer, image_source, clock):
        await analyzer.analyze(URL)
        clock.advance(301)
        await analyzer.analyze(URL)

        assert image_source.calls == [URL, URL]

    async def test_degraded_ocr_result_is_cached_normally(
        self, analyzer, image_cache, ocr_engine, ocr_failure, clock
    ):
        ocr_engine.failures[URL] = ocr_failure
        await analyzer.analyze(URL)
        clock.advance(120)

        assert image_cache.get(image_cache_key(URL)) is not None


class TestTopLevelFailure:
    async def test_unexpected_error_returns_zeroed_detail(
        self, analyzer, image_cache, clock, monkeypatch
    ):
        async def explode(url):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(analyzer, "analyze_skin", explode)

        detail = await analyzer.analyze(URL)

        assert detail.url == URL
        assert detail.status == AnalysisStatus.FAILED
        assert not detail.is_explicit
        assert detail.confidence == 0
        assert detail.skin_percentage == 0
        assert detail.text_analysis.confidence == 0
        assert detail.error == "unexpected"

        # failures are remembered for one minute only
        clock.advance(59)
        assert image_cache.get(image_cache_key(URL)) == detail
        clock.advance(2)
        assert image_cache.get(image_cache_key(URL)) is None

    async def test_cancellation_is_not_swallowed(self, analyzer, ocr_engine):
        ocr_engine.delay = 5.0
        task = asyncio.create_task(analyzer.analyze(URL))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestAnalyzeText:
    async def test_text_only_analysis_has_no_budget(self, analyzer, ocr_engine):
        ocr_engine.texts[URL] = "webcam camgirl"
        ocr_engine.delay = 0.3  # longer than the fast-path budget

        result = await analyzer.analyze_text(URL)

        assert result.categories == {"pornography"}
        assert result.has_explicit_text

    async def test_text_only_failure(self, analyzer, ocr_engine, ocr_failure):
        ocr_engine.failures[URL] = ocr_failure
        result = await analyzer.analyze_text(URL)
        assert result.status == AnalysisStatus.FAILED


@pytest.mark.slow
async def test_default_ocr_budget_is_three_seconds(clock, tmp_path):
    source = StubImageSource()
    ocr = StubOcrEngine("nude")
    ocr.delay = 10.0
    config = ScanConfig(log_dir=tmp_path)
    assert config.ocr_timeout == 3.0

    analyzer = ImageAnalyzer(source, ocr, ResultCache("images", timer=clock), config)
    started = time.monotonic()
    detail = await analyzer.analyze(URL)
    elapsed = time.monotonic() - started

    assert 2.9 <= elapsed < 4.0
    assert detail.text_analysis == TextAnalysisResult.empty(
        AnalysisStatus.TIMED_OUT, detail.text_analysis.error
    )
