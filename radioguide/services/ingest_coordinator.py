"""
Ingestion Coordination

Makes sure a single ingestion run owns the program store at a time.
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')


class IngestInProgressError(RuntimeError):
    """Raised when an ingestion run is requested while another one is active"""
    pass


class IngestCoordinator:
    """
    Coordinates ingestion runs to prevent concurrent writers.

    Uses an internal asyncio.Lock; a second run is rejected rather than queued
    so callers can retry later with an updated skip set.
    """

    def __init__(self):
        """Initialize the coordinator with a lock."""
        self._ingest_lock = asyncio.Lock()

    async def execute(self, ingest_func: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an ingestion run with concurrency protection.

        Args:
            ingest_func: Async function performing the run

        Returns:
            Result from ingest_func

        Raises:
            IngestInProgressError: If another run is active
            Any exception raised by ingest_func
        """
        if self._ingest_lock.locked():
            logger.warning("Feed ingestion already in progress, rejecting this request")
            raise IngestInProgressError("Feed ingestion already in progress")

        async with self._ingest_lock:
            return await ingest_func()

    def is_ingesting(self) -> bool:
        """
        Check if an ingestion run is currently in progress.

        Returns:
            True if a run is active, False otherwise
        """
        return self._ingest_lock.locked()


# Global singleton instance
_coordinator: IngestCoordinator | None = None


def get_ingest_coordinator() -> IngestCoordinator:
    """
    Get or create the global ingest coordinator singleton.

    Returns:
        The global IngestCoordinator instance
    """
    global _coordinator
    if _coordinator is None:
        _coordinator = IngestCoordinator()
    return _coordinator


def reset_ingest_coordinator() -> None:
    """
    Reset the ingest coordinator (mainly for testing).

    WARNING: Only use this in test environments!
    """
    global _coordinator
    _coordinator = None
