"""Per-area log files with run-based rotation.

Usage:
    # At run entry points (CLI, service start, tests):
    from content_scan.logging import start_run, end_run

    start_run("scan-123")
    try:
        ...
    finally:
        end_run()

    # In modules:
    import logging
    logger = logging.getLogger(__name__)

Log files land in SCAN_LOG_DIR (default logs/):
    - logs/cache.log, logs/analysis.log, logs/batch.log, ... (per area)
    - logs/run-3p.log (third-party libraries)
    - logs/*.previous.log (previous run's logs)
"""

from content_scan.logging.handlers import ModuleDispatchHandler, ThirdPartyHandler
from content_scan.logging.run_manager import (
    MODULE_TO_LOG,
    end_run,
    get_current_run_id,
    module_to_log_name,
    start_run,
)

__all__ = [
    "start_run",
    "end_run",
    "get_current_run_id",
    "module_to_log_name",
    "ModuleDispatchHandler",
    "ThirdPartyHandler",
    "MODULE_TO_LOG",
]
