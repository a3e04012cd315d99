"""
Tests for the host lifecycle hooks module.

Tests cover:
- HookEvent enum
- HookContext dataclass and host event parsing
- HookResult dataclass
- HookManager class
  - Registration (decorator and direct)
  - Triggering hooks
  - Result merging
  - Error isolation
"""

import pytest
from datetime import datetime

from momo_memory.hooks.types import HookEvent, HookContext, HookResult
from momo_memory.hooks.manager import HookManager


class TestHookEvent:
    """Tests for the HookEvent enum."""

    def test_all_events_exist(self):
        assert HookEvent.ChatMessage.value == "chat.message"
        assert HookEvent.SessionCompacted.value == "session.compacted"
        assert HookEvent.MessageUpdated.value == "message.updated"
        assert HookEvent.SessionDeleted.value == "session.deleted"

    def test_event_count(self):
        assert len(HookEvent) == 4


class TestHookContext:
    """Tests for the HookContext dataclass."""

    def test_basic_creation(self):
        ctx = HookContext(event=HookEvent.ChatMessage)
        assert ctx.event == HookEvent.ChatMessage
        assert isinstance(ctx.timestamp, datetime)
        assert ctx.session_id is None
        assert ctx.message_id is None
        assert ctx.parts is None
        assert ctx.is_summary is False
        assert ctx.is_finished is False
        assert ctx.metadata == {}

    def test_is_finished_summary(self):
        ctx = HookContext(
            event=HookEvent.MessageUpdated,
            role="assistant",
            is_summary=True,
            is_finished=True,
        )
        assert ctx.is_finished_summary

        ctx.is_finished = False
        assert not ctx.is_finished_summary

        ctx = HookContext(event=HookEvent.MessageUpdated, role="user", is_summary=True, is_finished=True)
        assert not ctx.is_finished_summary


class TestHookContextFromEvent:
    """Tests for parsing raw host events."""

    def test_session_compacted(self):
        ctx = HookContext.from_event({"type": "session.compacted", "properties": {"sessionID": "s1"}})
        assert ctx.event == HookEvent.SessionCompacted
        assert ctx.session_id == "s1"

    def test_message_updated(self):
        ctx = HookContext.from_event({
            "type": "message.updated",
            "properties": {
                "info": {
                    "id": "m1",
                    "sessionID": "s1",
                    "role": "assistant",
                    "summary": True,
                    "finish": "stop",
                }
            },
        })
        assert ctx.event == HookEvent.MessageUpdated
        assert ctx.session_id == "s1"
        assert ctx.message_id == "m1"
        assert ctx.is_finished_summary

    def test_message_updated_unfinished(self):
        ctx = HookContext.from_event({
            "type": "message.updated",
            "properties": {"info": {"sessionID": "s1", "role": "assistant", "summary": True}},
        })
        assert ctx.is_finished is False
        assert not ctx.is_finished_summary

    def test_session_deleted(self):
        ctx = HookContext.from_event({"type": "session.deleted", "properties": {"info": {"id": "s1"}}})
        assert ctx.event == HookEvent.SessionDeleted
        assert ctx.session_id == "s1"

    def test_unknown_event_type(self):
        assert HookContext.from_event({"type": "file.edited", "properties": {}}) is None
        assert HookContext.from_event({}) is None

    def test_chat_message_is_not_a_host_event(self):
        event = {"type": "chat.message", "properties": {"sessionID": "s1"}}
        assert HookContext.from_event(event) is None


class TestHookResult:
    """Tests for the HookResult dataclass."""

    def test_default_values(self):
        result = HookResult()
        assert result.skip_remaining is False
        assert result.metadata == {}


class TestHookManager:
    """Tests for the HookManager class."""

    def test_initialization(self):
        manager = HookManager()
        for event in HookEvent:
            assert manager.has_hooks(event) is False

    def test_register_decorator(self):
        manager = HookManager()

        @manager.on(HookEvent.ChatMessage)
        def on_message(ctx):
            return HookResult()

        assert manager.has_hooks(HookEvent.ChatMessage)

    def test_register_direct(self):
        manager = HookManager()

        def my_handler(ctx):
            return HookResult()

        manager.register(HookEvent.SessionDeleted, my_handler)
        assert manager.has_hooks(HookEvent.SessionDeleted)

    def test_register_invalid_event(self):
        manager = HookManager()
        with pytest.raises(ValueError):
            manager.register("not-an-event", lambda ctx: None)

    def test_unregister(self):
        manager = HookManager()

        def my_handler(ctx):
            return HookResult()

        manager.register(HookEvent.SessionDeleted, my_handler)
        assert manager.unregister(HookEvent.SessionDeleted, my_handler) is True
        assert manager.has_hooks(HookEvent.SessionDeleted) is False

    def test_unregister_nonexistent(self):
        manager = HookManager()
        assert manager.unregister(HookEvent.SessionDeleted, lambda ctx: None) is False

    def test_clear_specific_event(self):
        manager = HookManager()

        @manager.on(HookEvent.ChatMessage)
        def handler1(ctx):
            pass

        @manager.on(HookEvent.SessionDeleted)
        def handler2(ctx):
            pass

        manager.clear(HookEvent.ChatMessage)
        assert manager.has_hooks(HookEvent.ChatMessage) is False
        assert manager.has_hooks(HookEvent.SessionDeleted) is True

    def test_clear_all_events(self):
        manager = HookManager()

        @manager.on(HookEvent.ChatMessage)
        def handler1(ctx):
            pass

        @manager.on(HookEvent.SessionDeleted)
        def handler2(ctx):
            pass

        manager.clear()
        assert manager.has_hooks(HookEvent.ChatMessage) is False
        assert manager.has_hooks(HookEvent.SessionDeleted) is False

    def test_trigger_no_handlers(self):
        manager = HookManager()
        result = manager.trigger(HookEvent.ChatMessage)
        assert result.metadata == {}

    def test_trigger_with_context_kwargs(self):
        manager = HookManager()
        received_context = []

        @manager.on(HookEvent.ChatMessage)
        def on_message(ctx):
            received_context.append(ctx)

        parts = []
        manager.trigger(HookEvent.ChatMessage, session_id="s1", message_id="m1", parts=parts)

        assert len(received_context) == 1
        assert received_context[0].session_id == "s1"
        assert received_context[0].parts is parts

    def test_trigger_with_provided_context(self):
        manager = HookManager()
        received_context = []

        @manager.on(HookEvent.SessionCompacted)
        def on_compacted(ctx):
            received_context.append(ctx)

        ctx = HookContext(event=HookEvent.SessionCompacted, session_id="s1")
        manager.trigger(HookEvent.SessionCompacted, context=ctx)

        assert received_context == [ctx]

    def test_multiple_handlers_merge_metadata(self):
        manager = HookManager()
        call_order = []

        @manager.on(HookEvent.SessionDeleted)
        def handler1(ctx):
            call_order.append(1)
            return HookResult(metadata={"a": 1})

        @manager.on(HookEvent.SessionDeleted)
        def handler2(ctx):
            call_order.append(2)
            return {"metadata": {"b": 2}}

        result = manager.trigger(HookEvent.SessionDeleted)
        assert call_order == [1, 2]
        assert result.metadata == {"a": 1, "b": 2}

    def test_skip_remaining(self):
        manager = HookManager()
        call_order = []

        @manager.on(HookEvent.ChatMessage)
        def handler1(ctx):
            call_order.append(1)
            return HookResult(skip_remaining=True)

        @manager.on(HookEvent.ChatMessage)
        def handler2(ctx):
            call_order.append(2)

        manager.trigger(HookEvent.ChatMessage)
        assert call_order == [1]

    def test_handler_error_does_not_propagate(self):
        manager = HookManager()
        call_order = []

        @manager.on(HookEvent.ChatMessage)
        def failing(ctx):
            raise RuntimeError("boom")

        @manager.on(HookEvent.ChatMessage)
        def healthy(ctx):
            call_order.append("healthy")
            return HookResult(metadata={"ok": True})

        result = manager.trigger(HookEvent.ChatMessage)
        assert call_order == ["healthy"]
        assert result.metadata == {"ok": True}

    def test_list_hooks(self):
        manager = HookManager()

        @manager.on(HookEvent.ChatMessage)
        def inject(ctx):
            pass

        assert manager.list_hooks() == {"chat.message": ["inject"]}
        assert manager.list_hooks(HookEvent.SessionDeleted) == {}
