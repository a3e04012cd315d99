"""
Memory Hooks Module - Connect Momo memory with host lifecycle hooks.

This module provides hook handlers that integrate Momo with the host's
session events. By registering these hooks, memory operations are triggered
automatically at the appropriate points of a session.

Hook Events and Memory Operations:
- ChatMessage: Inject profile and memory context once per session
- SessionCompacted / MessageUpdated: Ingest a marker for finished compactions
- SessionDeleted: Drop all per-session tracking

Both paths are best-effort: backend failures degrade to "no context" or
"nothing ingested" and never fail the host hook.

Usage:
    from momo_memory.memory.hooks import MemoryHooks

    memory_hooks = MemoryHooks(client, tags)
    memory_hooks.register_all(hook_manager)
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from ..client import MemoryBackend
from ..hooks.types import HookEvent, HookContext, HookResult
from ..hooks.manager import HookManager
from ..logger import logger
from ..models import MemoryItem, ProfileData
from .compaction import COMPACTION_COOLDOWN_MS, CompactionTracker
from .context import build_context_part, format_context_for_prompt
from .session import SessionStore
from .tags import ContainerTags

USER_CONTEXT_QUERY = "recent context"
PROJECT_CONTEXT_QUERY = "project context"


@dataclass
class InjectionState:
    injected: bool = False


class MemoryHooks:
    """
    Hook handlers for Momo memory integration.

    Can be registered with a HookManager to enable automatic context
    injection and compaction ingestion.
    """

    def __init__(
        self,
        client: MemoryBackend,
        tags: ContainerTags,
        context_limit: int = 5,
        search_mode: str = "hybrid",
        cooldown_ms: float = COMPACTION_COOLDOWN_MS,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        """
        Initialize memory hooks.

        Args:
            client: Memory backend
            tags: Container tags for the user and the current project
            context_limit: Memories fetched per scope for injected context
            search_mode: Search mode used for context retrieval
            cooldown_ms: Minimum time between compaction ingestions per session
            executor: Shared executor for fetches and background ingestion
        """
        self.client = client
        self.tags = tags
        self.context_limit = context_limit
        self.search_mode = search_mode

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="momo-memory"
        )
        self.compaction = CompactionTracker(
            client,
            tags.project,
            cooldown_ms=cooldown_ms,
            executor=self._executor,
        )
        self._injections: SessionStore[InjectionState] = SessionStore(InjectionState)

    def register_all(self, hook_manager: HookManager) -> None:
        hook_manager.register(HookEvent.ChatMessage, self.on_chat_message)
        hook_manager.register(HookEvent.SessionCompacted, self.on_event)
        hook_manager.register(HookEvent.MessageUpdated, self.on_event)
        hook_manager.register(HookEvent.SessionDeleted, self.on_event)

    def unregister_all(self, hook_manager: HookManager) -> None:
        hook_manager.unregister(HookEvent.ChatMessage, self.on_chat_message)
        hook_manager.unregister(HookEvent.SessionCompacted, self.on_event)
        hook_manager.unregister(HookEvent.MessageUpdated, self.on_event)
        hook_manager.unregister(HookEvent.SessionDeleted, self.on_event)

    def on_chat_message(self, context: HookContext) -> HookResult:
        """
        Handle ChatMessage - prepend memory context on a session's first message.

        The session is claimed before fetching, so a failed or empty fetch
        still counts as the session's one injection attempt.

        Args:
            context: Hook context with session_id, message_id and the mutable parts list

        Returns:
            HookResult with injection metadata
        """
        session_id = context.session_id
        if not session_id or not self._claim_injection(session_id):
            return HookResult(metadata={"context_injected": False})

        try:
            profile, user_memories, project_memories = self._fetch_context()
            text = format_context_for_prompt(profile, user_memories, project_memories)
            if not text:
                return HookResult(metadata={"context_injected": False})

            if context.parts is None:
                context.parts = []
            context.parts.insert(0, build_context_part(session_id, context.message_id, text))
            logger.debug(f"[memory] Injected context into session {session_id}")
            return HookResult(metadata={"context_injected": True})
        except Exception as e:
            logger.warning(f"[memory] Context injection failed for {session_id}: {e}")
            return HookResult(metadata={"context_injected": False, "injection_error": str(e)})

    def on_event(self, context: HookContext) -> HookResult:
        """Handle compaction-related events and session teardown."""
        future = self.compaction.handle_event(context)

        if context.event == HookEvent.SessionDeleted and context.session_id:
            self._injections.discard(context.session_id)

        return HookResult(metadata={"ingestion_dispatched": future is not None})

    def is_injected(self, session_id: str) -> bool:
        state = self._injections.get(session_id)
        return bool(state and state.injected)

    def reset(self) -> None:
        """Forget all per-session tracking."""
        self._injections.clear()
        self.compaction.reset()

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def _claim_injection(self, session_id: str) -> bool:
        with self._injections.locked(session_id) as state:
            if state.injected:
                return False
            state.injected = True
            return True

    def _fetch_context(self):
        """Fetch profile and both memory scopes in parallel; each degrades to empty on failure."""
        profile_f = self._executor.submit(self._fetch_profile)
        user_f = self._executor.submit(self._search, USER_CONTEXT_QUERY, self.tags.user)
        project_f = self._executor.submit(self._search, PROJECT_CONTEXT_QUERY, self.tags.project)
        return profile_f.result(), user_f.result(), project_f.result()

    def _fetch_profile(self) -> Optional[ProfileData]:
        try:
            profile = self.client.compute_profile(
                self.tags.user,
                include_dynamic=True,
                generate_narrative=True,
            )
            return profile.to_profile_data()
        except Exception as e:
            logger.debug(f"[memory] Profile fetch failed: {e}")
            return None

    def _search(self, query: str, container_tag: str) -> List[MemoryItem]:
        try:
            results = self.client.search(
                query,
                [container_tag],
                limit=self.context_limit,
                mode=self.search_mode,
            )
            return [r.to_memory_item() for r in results]
        except Exception as e:
            logger.debug(f"[memory] Search in {container_tag} failed: {e}")
            return []
