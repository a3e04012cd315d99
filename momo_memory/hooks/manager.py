"""
Dispatch of host session events to plugin handlers.

The host may deliver events for different sessions from different threads,
so the handler table is guarded by a lock and each trigger runs over a
snapshot of it. A handler that raises is logged and skipped; the host never
sees the exception.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Union

from .types import HookEvent, HookContext, HookResult
from ..logger import logger


HookHandler = Callable[[HookContext], Optional[Union[HookResult, Dict[str, Any]]]]


class HookManager:
    """
    Registry of handlers per host event.

    Example:
        hooks = HookManager()

        @hooks.on(HookEvent.SessionDeleted)
        def forget_session(ctx):
            sessions.pop(ctx.session_id, None)

        hooks.register(HookEvent.ChatMessage, inject_context)
        result = hooks.trigger(HookEvent.ChatMessage, session_id="s1", parts=parts)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._handlers: Dict[HookEvent, List[HookHandler]] = {event: [] for event in HookEvent}

    def on(self, event: HookEvent) -> Callable[[HookHandler], HookHandler]:
        """Decorator form of ``register``."""
        def decorator(handler: HookHandler) -> HookHandler:
            self.register(event, handler)
            return handler
        return decorator

    def register(self, event: HookEvent, handler: HookHandler) -> None:
        """
        Add a handler for a host event. Handlers run in registration order.

        Raises:
            ValueError: If ``event`` is not a HookEvent
        """
        if not isinstance(event, HookEvent):
            raise ValueError(f"Invalid hook event: {event!r}")
        with self._lock:
            self._handlers[event].append(handler)
        logger.debug(f"[hooks] {event.value} -> {_handler_name(handler)}")

    def unregister(self, event: HookEvent, handler: HookHandler) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        with self._lock:
            handlers = self._handlers[event]
            if handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    def clear(self, event: Optional[HookEvent] = None) -> None:
        with self._lock:
            for e in ([event] if event else HookEvent):
                self._handlers[e] = []

    def trigger(
        self,
        event: HookEvent,
        context: Optional[HookContext] = None,
        **context_kwargs
    ) -> HookResult:
        """
        Run the handlers for ``event`` and combine their results.

        Args:
            event: Host event being reported
            context: Pre-built context (e.g. from ``HookContext.from_event``)
            **context_kwargs: Fields for a new HookContext when none is given

        Returns:
            HookResult whose metadata is the union of all handler metadata,
            later handlers overwriting earlier keys
        """
        if context is None:
            context = HookContext(event=event, **context_kwargs)
        else:
            context.event = event

        with self._lock:
            handlers = list(self._handlers[event])

        combined = HookResult()
        for handler in handlers:
            try:
                result = handler(context)
            except Exception as e:
                logger.error(f"[hooks] {_handler_name(handler)} failed on {event.value}: {e}")
                continue

            if isinstance(result, dict):
                result = HookResult(**result)
            if result is None:
                continue

            combined.metadata.update(result.metadata)
            if result.skip_remaining:
                logger.debug(f"[hooks] {_handler_name(handler)} stopped {event.value} dispatch")
                break

        return combined

    def has_hooks(self, event: HookEvent) -> bool:
        with self._lock:
            return bool(self._handlers[event])

    def list_hooks(self, event: Optional[HookEvent] = None) -> Dict[str, List[str]]:
        """Handler names per event value, omitting events without handlers."""
        with self._lock:
            return {
                e.value: [_handler_name(h) for h in self._handlers[e]]
                for e in ([event] if event else HookEvent)
                if self._handlers[e]
            }


def _handler_name(handler: HookHandler) -> str:
    return getattr(handler, "__name__", repr(handler))
