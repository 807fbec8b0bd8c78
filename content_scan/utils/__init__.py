"""Shared utilities: lazy HTTP clients, bounded concurrency, async lifecycle."""

from .async_context import AsyncContextManager
from .async_utils import run_with_concurrency
from .http_client import (
    BaseAsyncHttpClient,
    cleanup_all_clients,
    register_cleanup,
)

__all__ = [
    "AsyncContextManager",
    "BaseAsyncHttpClient",
    "cleanup_all_clients",
    "register_cleanup",
    "run_with_concurrency",
]
