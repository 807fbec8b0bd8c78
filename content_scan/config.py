"""Configuration and environment setup for content_scan.

Settings come from environment variables (a local .env file is loaded once
on import) and can be overridden by constructing ScanConfig explicitly.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def is_dev_mode() -> bool:
    """True when SCAN_MODE is set to 'dev'."""
    return os.getenv("SCAN_MODE", "prod").lower() == "dev"


@dataclass
class ScanConfig:
    """Configuration for image content scanning.

    Environment Variables:
        SCAN_OCR_BASE_URL: OCR service base URL (default: http://localhost:8002)
        SCAN_OCR_LANG: OCR language code (default: eng)
        SCAN_OCR_TIMEOUT_MS: Per-image OCR budget in milliseconds (default: 3000)
        SCAN_IMAGE_TIMEOUT: Image download timeout in seconds (default: 15)
        SCAN_IMAGE_MAX_SIDE: Decoded images are shrunk to fit this box (default: 100)
        SCAN_RESULT_TTL: Cache TTL for analysis results in seconds (default: 300)
        SCAN_FAILURE_TTL: Cache TTL for failed analyses in seconds (default: 60)
        SCAN_BATCH_CONCURRENCY: Max analyses in flight per batch (default: 2)
        SCAN_CACHE_SWEEP_INTERVAL: Seconds between expiry sweeps, 0 disables (default: 0)
        SCAN_LOG_DIR: Directory for log files (default: logs)
    """

    ocr_base_url: str = field(
        default_factory=lambda: os.environ.get("SCAN_OCR_BASE_URL", "http://localhost:8002")
    )
    ocr_language: str = field(default_factory=lambda: os.environ.get("SCAN_OCR_LANG", "eng"))
    ocr_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SCAN_OCR_TIMEOUT_MS", "3000")) / 1000
    )
    image_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SCAN_IMAGE_TIMEOUT", "15"))
    )
    image_max_side: int = field(
        default_factory=lambda: int(os.environ.get("SCAN_IMAGE_MAX_SIDE", "100"))
    )
    result_ttl: int = field(default_factory=lambda: int(os.environ.get("SCAN_RESULT_TTL", "300")))
    failure_ttl: int = field(
        default_factory=lambda: int(os.environ.get("SCAN_FAILURE_TTL", "60"))
    )
    batch_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("SCAN_BATCH_CONCURRENCY", "2"))
    )
    sweep_interval: float = field(
        default_factory=lambda: float(os.environ.get("SCAN_CACHE_SWEEP_INTERVAL", "0"))
    )
    log_dir: Path = field(default_factory=lambda: Path(os.environ.get("SCAN_LOG_DIR", "logs")))

    def __post_init__(self) -> None:
        if self.batch_concurrency < 1:
            raise ValueError("batch_concurrency must be at least 1")
        if self.ocr_timeout <= 0:
            raise ValueError("ocr_timeout must be positive")


_config: ScanConfig | None = None


def get_scan_config() -> ScanConfig:
    """Get global ScanConfig instance."""
    global _config
    if _config is None:
        _config = ScanConfig()
    return _config


_logging_configured = False


def configure_logging(run_name: str, log_dir: Path | None = None) -> None:
    """Install the per-area file handlers (once) and start a logging run.

    content_scan records are dispatched to per-area files and do not reach
    the root logger; everything else lands in run-3p.log. Dev mode also
    echoes content_scan records to stderr at DEBUG.
    """
    global _logging_configured

    from content_scan.logging import ModuleDispatchHandler, ThirdPartyHandler, start_run

    if not _logging_configured:
        target = log_dir or get_scan_config().log_dir
        formatter = logging.Formatter(LOG_FORMAT)

        dispatch = ModuleDispatchHandler(target)
        dispatch.setFormatter(formatter)
        package_logger = logging.getLogger("content_scan")
        package_logger.addHandler(dispatch)
        package_logger.setLevel(logging.DEBUG if is_dev_mode() else logging.INFO)
        package_logger.propagate = False

        if is_dev_mode():
            console = logging.StreamHandler()
            console.setFormatter(formatter)
            package_logger.addHandler(console)

        third_party = ThirdPartyHandler(target)
        third_party.setFormatter(formatter)
        third_party.setLevel(logging.WARNING)
        logging.getLogger().addHandler(third_party)

        _logging_configured = True

    start_run(run_name)
