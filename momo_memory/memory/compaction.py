"""
Compaction tracking for ingesting conversation summaries into Momo.

The host reports a compaction (session.compacted) before the summary message
exists, and the finished summary arrives later as a message update. The
tracker pairs the two per session, enforces a cooldown between ingestions,
and forgets the session when the host deletes it.

Per session:

    Idle --compaction_started--> CompactionPending
    CompactionPending --summary_ready--> Idle  (ingest unless inside cooldown)
    any --session_ended--> (state removed)
"""

import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Optional

from ..client import MemoryBackend
from ..hooks.types import HookContext, HookEvent
from ..logger import logger
from .session import SessionStore

COMPACTION_COOLDOWN_MS = 30_000
EPISODE_MEMORY_TYPE = "episode"


@dataclass
class CompactionState:
    """Compaction bookkeeping for one session. Times are epoch milliseconds."""

    last_compaction_at: Optional[float] = None
    in_progress: bool = False


def _now_ms() -> float:
    return time.time() * 1000


class CompactionTracker:
    """
    Decides when a compaction summary should be ingested.

    Ingestion runs on a background executor and is best-effort: failures are
    logged and dropped, never retried, never raised to the event handler.
    """

    def __init__(
        self,
        client: MemoryBackend,
        container_tag: str,
        cooldown_ms: float = COMPACTION_COOLDOWN_MS,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            client: Memory backend receiving the ingestion
            container_tag: Project container tag the summary is stored under
            cooldown_ms: Minimum time between ingestions for one session
            executor: Executor for fire-and-forget ingestion (one is created if omitted)
            clock: Returns the current time in milliseconds
        """
        self.client = client
        self.container_tag = container_tag
        self.cooldown_ms = cooldown_ms
        self.clock = clock or _now_ms
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="momo-compaction"
        )
        self._sessions: SessionStore[CompactionState] = SessionStore(CompactionState)

    def handle_event(self, context: HookContext) -> Optional[Future]:
        """Dispatch a host event. Returns the ingestion future when one was started."""
        if not context.session_id:
            return None

        if context.event == HookEvent.SessionCompacted:
            self.compaction_started(context.session_id)
        elif context.event == HookEvent.MessageUpdated:
            if context.is_finished_summary:
                return self.summary_ready(context.session_id)
        elif context.event == HookEvent.SessionDeleted:
            self.session_ended(context.session_id)
        return None

    def compaction_started(self, session_id: str) -> None:
        with self._sessions.locked(session_id) as state:
            state.in_progress = True
        logger.debug(f"[compaction] Compaction started for {session_id}")

    def summary_ready(self, session_id: str, now: Optional[float] = None) -> Optional[Future]:
        """
        Handle a finished summary message.

        Args:
            session_id: Session whose summary finished
            now: Current time in milliseconds (defaults to the tracker's clock)

        Returns:
            Future of the dispatched ingestion, or None if nothing was sent
        """
        now = self.clock() if now is None else now

        with self._sessions.locked(session_id, create=False) as state:
            if state is None or not state.in_progress:
                return None

            state.in_progress = False
            last = state.last_compaction_at
            if last is not None and now - last < self.cooldown_ms:
                logger.debug(f"[compaction] Skipping ingestion for {session_id}: inside cooldown")
                return None

            state.last_compaction_at = now

        future = self._executor.submit(self._ingest, session_id)
        future.add_done_callback(lambda f: self._log_outcome(session_id, f))
        return future

    def session_ended(self, session_id: str) -> None:
        if self._sessions.discard(session_id):
            logger.debug(f"[compaction] Dropped state for {session_id}")

    def get_state(self, session_id: str) -> Optional[CompactionState]:
        """Snapshot of a session's state, or None if untracked."""
        state = self._sessions.get(session_id)
        return replace(state) if state is not None else None

    def reset(self) -> None:
        self._sessions.clear()

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def _ingest(self, session_id: str) -> bool:
        # The host does not hand over the summary text here, so a marker is
        # stored; the summary itself reaches Momo with the next chat message.
        try:
            self.client.ingest_conversation(
                messages=[
                    {
                        "role": "assistant",
                        "content": f"[Session compaction summary for session {session_id}]",
                    }
                ],
                container_tag=self.container_tag,
                session_id=session_id,
                memory_type=EPISODE_MEMORY_TYPE,
            )
            return True
        except Exception as e:
            logger.warning(f"[compaction] Ingestion failed for {session_id}: {e}")
            return False

    def _log_outcome(self, session_id: str, future: Future) -> None:
        if not future.cancelled() and future.result():
            logger.info(f"[compaction] Ingested compaction marker for {session_id}")
