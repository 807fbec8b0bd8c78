"""Logging handlers that split content_scan logs into per-area files.

Both handlers write synchronously. Writes are a few microseconds per record,
which is negligible next to image fetches and OCR calls on the event loop.
"""

import logging
from pathlib import Path
from typing import TextIO

from content_scan.logging.run_manager import module_to_log_name, should_rotate

PACKAGE = "content_scan"


class _RunFileHandler(logging.Handler):
    """Writes each record to <log_dir>/<name>.log, rotating once per run.

    On the first write to a file inside a run, <name>.log moves to
    <name>.previous.log (replacing it) and a fresh file is opened. Streams
    are cached so each file is opened at most once per run.
    """

    def __init__(self, log_dir: Path):
        super().__init__()
        self.log_dir = Path(log_dir)
        self._streams: dict[str, TextIO] = {}

    def log_name_for(self, record: logging.LogRecord) -> str | None:
        """File name for record, or None to drop it."""
        raise NotImplementedError

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_name = self.log_name_for(record)
            if log_name is None:
                return
            stream = self._stream_for(log_name)
            stream.write(self.format(record) + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def _stream_for(self, log_name: str) -> TextIO:
        rotate = should_rotate(log_name)
        if not rotate and log_name in self._streams:
            return self._streams[log_name]

        existing = self._streams.pop(log_name, None)
        if existing is not None:
            existing.close()

        self.log_dir.mkdir(parents=True, exist_ok=True)
        current = self.log_dir / f"{log_name}.log"
        if rotate and current.exists():
            current.replace(self.log_dir / f"{log_name}.previous.log")

        self._streams[log_name] = current.open("a", encoding="utf-8")
        return self._streams[log_name]

    @property
    def open_files(self) -> list[str]:
        return sorted(self._streams)

    def close(self) -> None:
        self.acquire()
        try:
            for stream in self._streams.values():
                try:
                    stream.close()
                except OSError:
                    pass
            self._streams.clear()
        finally:
            self.release()
        super().close()


class ModuleDispatchHandler(_RunFileHandler):
    """Routes content_scan records to one file per area (cache.log, batch.log, ...).

    Usage:
        handler = ModuleDispatchHandler(Path("logs"))
        handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        logging.getLogger("content_scan").addHandler(handler)
    """

    def log_name_for(self, record: logging.LogRecord) -> str | None:
        return module_to_log_name(record.name)


class ThirdPartyHandler(_RunFileHandler):
    """All non-content_scan records (httpx, PIL, asyncio...) go to run-3p.log."""

    LOG_NAME = "run-3p"

    def log_name_for(self, record: logging.LogRecord) -> str | None:
        if record.name == PACKAGE or record.name.startswith(PACKAGE + "."):
            return None
        return self.LOG_NAME
