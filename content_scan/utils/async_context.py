"""Async context manager base for objects that hold connections or tasks."""


class AsyncContextManager:
    """Closes on leaving ``async with``, including on error.

    Subclasses override close(); it may run more than once.
    """

    async def close(self) -> None:
        """Release connections or background tasks."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
