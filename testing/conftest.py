"""
Pytest configuration and shared fixtures for content_scan tests.

Collaborators are replaced with in-memory stubs so no test touches the
network. Async tests run under pytest-asyncio in auto mode.

Usage:
    pytest testing/
    pytest testing/test_batch_analyzer.py -k order
"""

import asyncio
from collections.abc import Generator

import pytest

from content_scan.config import ScanConfig
from content_scan.errors import DecodeFailure, OcrFailure
from content_scan.logging import end_run, start_run
from content_scan.service import ContentScanService
from content_scan.sources import ImageSource, OcrEngine
from content_scan.types import PixelBuffer

SKIN_RGB = (200, 60, 30)
BLUE_RGB = (0, 0, 255)


@pytest.fixture(autouse=True)
def logging_run(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Give each test module its own logging run."""
    test_path = request.node.nodeid.split("::")[0]
    test_name = test_path.replace("/", "-").replace(".py", "")
    start_run(f"test-{test_name}")
    yield
    end_run()


def solid_buffer(rgb: tuple[int, int, int], width: int = 100, height: int = 100) -> PixelBuffer:
    """Buffer where every pixel has the same colour."""
    return PixelBuffer(data=bytes(rgb) * (width * height), width=width, height=height)


class FakeClock:
    """Manually advanced timer for cache expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubImageSource(ImageSource):
    """Serves pre-built buffers, records calls and tracks concurrency."""

    def __init__(self, default: PixelBuffer | None = None):
        self.default = default or solid_buffer(BLUE_RGB)
        self.buffers: dict[str, PixelBuffer] = {}
        self.failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[str] = []
        self.events: list[tuple[str, str]] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def load(self, url: str) -> PixelBuffer:
        self.calls.append(url)
        self.events.append(("start", url))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
            if url in self.failures:
                raise self.failures[url]
            return self.buffers.get(url, self.default)
        finally:
            self.active -= 1
            self.events.append(("end", url))

    async def close(self) -> None:
        self.closed = True


class StubOcrEngine(OcrEngine):
    """Returns canned text per URL, optionally slow or failing."""

    def __init__(self, default_text: str = ""):
        self.default_text = default_text
        self.texts: dict[str, str] = {}
        self.failures: dict[str, Exception] = {}
        self.delay = 0.0
        self.calls: list[str] = []
        self.cancelled: list[str] = []
        self.closed = False

    async def extract_text(self, url: str) -> str:
        self.calls.append(url)
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        if url in self.failures:
            raise self.failures[url]
        return self.texts.get(url, self.default_text)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scan_config(tmp_path) -> ScanConfig:
    return ScanConfig(
        ocr_base_url="http://ocr.test",
        ocr_timeout=0.2,
        result_ttl=300,
        failure_ttl=60,
        batch_concurrency=2,
        sweep_interval=0,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def image_source() -> StubImageSource:
    return StubImageSource()


@pytest.fixture
def ocr_engine() -> StubOcrEngine:
    return StubOcrEngine()


@pytest.fixture
def service(scan_config, image_source, ocr_engine, clock) -> ContentScanService:
    return ContentScanService(
        config=scan_config,
        image_source=image_source,
        ocr_engine=ocr_engine,
        timer=clock,
    )


@pytest.fixture
def decode_failure() -> DecodeFailure:
    return DecodeFailure("Failed to fetch image: HTTP 404", url="http://img.test/missing.jpg")


@pytest.fixture
def ocr_failure() -> OcrFailure:
    return OcrFailure("Connection failed: refused", url="http://img.test/a.jpg")


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (real-time OCR budget)",
    )
