"""
Hook types and data structures for host lifecycle hooks.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional, Dict
from datetime import datetime


class HookEvent(Enum):
    """
    Host events the plugin reacts to.

    Each event corresponds to a point in the host's session lifecycle:
    - ChatMessage: A user message is about to be sent; parts may be prepended
    - SessionCompacted: The host compacted (summarized) a session
    - MessageUpdated: A message changed state (e.g. a summary finished)
    - SessionDeleted: The host destroyed a session
    """
    ChatMessage = "chat.message"
    SessionCompacted = "session.compacted"
    MessageUpdated = "message.updated"
    SessionDeleted = "session.deleted"


# Events delivered through the host event stream
HOST_EVENTS = frozenset({
    HookEvent.SessionCompacted,
    HookEvent.MessageUpdated,
    HookEvent.SessionDeleted,
})


@dataclass
class HookContext:
    """
    Context object passed to hook handlers.

    Attributes:
        event: The hook event type
        timestamp: When the event occurred
        session_id: Session the event belongs to
        message_id: Message ID (ChatMessage, MessageUpdated)
        role: Message role (MessageUpdated)
        is_summary: Whether the message is a compaction summary (MessageUpdated)
        is_finished: Whether the message finished generating (MessageUpdated)
        parts: Mutable list of message parts (ChatMessage)
        metadata: Additional event-specific data
    """
    event: HookEvent
    timestamp: datetime = field(default_factory=datetime.now)
    session_id: Optional[str] = None
    message_id: Optional[str] = None
    role: Optional[str] = None
    is_summary: bool = False
    is_finished: bool = False
    parts: Optional[list] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_finished_summary(self) -> bool:
        return self.role == "assistant" and self.is_summary and self.is_finished

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> Optional["HookContext"]:
        """
        Build a context from a raw host event ``{"type": ..., "properties": {...}}``.

        Returns None for event types the plugin does not handle. ChatMessage is
        a direct host call, not an event, so it is never built from one.
        """
        try:
            hook_event = HookEvent(event.get("type"))
        except ValueError:
            return None
        if hook_event not in HOST_EVENTS:
            return None

        props = event.get("properties") or {}
        info = props.get("info") or {}

        if hook_event == HookEvent.MessageUpdated:
            return cls(
                event=hook_event,
                session_id=info.get("sessionID"),
                message_id=info.get("id"),
                role=info.get("role"),
                is_summary=bool(info.get("summary")),
                is_finished=bool(info.get("finish")),
            )
        if hook_event == HookEvent.SessionDeleted:
            return cls(event=hook_event, session_id=info.get("id") or props.get("sessionID"))

        return cls(
            event=hook_event,
            session_id=props.get("sessionID"),
            message_id=props.get("messageID"),
        )


@dataclass
class HookResult:
    """
    Result returned by a hook handler.

    Attributes:
        skip_remaining: If True, skip remaining hooks for this event
        metadata: Additional result data (merged across handlers)
    """
    skip_remaining: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
