"""Run-based log rotation and logger-name routing.

A "run" is one logical unit of work (a CLI scan, a test module, a service
lifetime). The first write to each log file inside a run rotates it.

Usage:
    from content_scan.logging import start_run, end_run

    start_run("scan-abc123")
    try:
        ...
    finally:
        end_run()
"""

from contextvars import ContextVar
from dataclasses import dataclass, field
from functools import lru_cache

# Longest-prefix-match from logger name to log file name.
# Unmapped modules go to "misc.log"
MODULE_TO_LOG = {
    "content_scan.cache": "cache",
    "content_scan.classifiers": "classifiers",
    "content_scan.analysis.batch": "batch",
    "content_scan.analysis": "analysis",
    "content_scan.sources": "sources",
    "content_scan.service": "service",
    "content_scan.utils": "utils",
    "content_scan.config": "config",
    "content_scan.logging": "logging-internal",
    "scripts": "scripts",
    "testing": "testing",
}
FALLBACK_LOG = "misc"


@dataclass
class LogRun:
    """Identity of the active run and the log files it has already rotated."""

    run_id: str
    rotated: set[str] = field(default_factory=set)


# Per-context, so concurrent async runs keep separate rotation state
_active_run: ContextVar[LogRun | None] = ContextVar("active_log_run", default=None)


def start_run(run_id: str) -> None:
    """Begin a run. Calling again starts a fresh run with nothing rotated."""
    _active_run.set(LogRun(run_id))


def end_run() -> None:
    _active_run.set(None)


def get_current_run_id() -> str | None:
    run = _active_run.get()
    return run.run_id if run else None


def should_rotate(log_name: str) -> bool:
    """True on the first write to log_name inside the active run, then False."""
    run = _active_run.get()
    if run is None or log_name in run.rotated:
        return False
    run.rotated.add(log_name)
    return True


@lru_cache(maxsize=None)
def module_to_log_name(module_name: str) -> str:
    """Resolve a logger name (e.g. "content_scan.cache.ttl_cache") to a log file name.

    A prefix matches the name itself or a dotted child of it, so
    "content_scan.cachex" does not land in cache.log.
    """
    best = None
    for prefix in MODULE_TO_LOG:
        if module_name != prefix and not module_name.startswith(prefix + "."):
            continue
        if best is None or len(prefix) > len(best):
            best = prefix
    return MODULE_TO_LOG[best] if best else FALLBACK_LOG
