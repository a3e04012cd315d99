"""
Polling of asynchronous document ingestion jobs.
"""

import time
from typing import Callable

from ..client import MemoryBackend
from ..logger import logger
from ..models import IngestionStatus

DEFAULT_INGEST_TIMEOUT_MS = 120_000
DEFAULT_POLL_INTERVAL_MS = 1_500

TERMINAL_STATUSES = frozenset({"completed", "failed"})


class IngestionPoller:
    """
    Waits for an ingestion job to reach a terminal status.

    Polls at a fixed interval, sleeping in between. The last sleep is cut short
    at the deadline, so the whole wait stays within the caller's timeout; there
    is no way to cancel a wait already in progress.
    """

    def __init__(
        self,
        client: MemoryBackend,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            client: Backend queried for ingestion status
            clock: Monotonic clock in seconds
            sleep: Sleep function taking seconds
        """
        self.client = client
        self.clock = clock
        self.sleep = sleep

    def await_terminal(
        self,
        ingestion_id: str,
        timeout_ms: int = DEFAULT_INGEST_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> IngestionStatus:
        """
        Poll until the job is completed or failed, or the timeout elapses.

        Args:
            ingestion_id: Job to poll
            timeout_ms: Upper bound on the total wait
            poll_interval_ms: Pause between status checks

        Returns:
            The terminal status, or a synthetic "processing" status on timeout
            (the job may still finish later; this is not an error)
        """
        start = self.clock()
        while (self.clock() - start) * 1000 < timeout_ms:
            status = self.client.get_ingestion_status(ingestion_id)
            if status.status in TERMINAL_STATUSES:
                logger.debug(f"[ingest] {ingestion_id} finished with status {status.status}")
                return status
            remaining_ms = timeout_ms - (self.clock() - start) * 1000
            if remaining_ms <= 0:
                break
            # never sleep past the deadline
            self.sleep(min(poll_interval_ms, remaining_ms) / 1000)

        logger.debug(f"[ingest] {ingestion_id} still processing after {timeout_ms}ms")
        return IngestionStatus(status="processing")
