"""
Tests for the memory hooks integration module.

Tests cover:
- MemoryHooks registration with HookManager
- ChatMessage hook for once-per-session context injection
- Degradation when backend calls fail
- Compaction and session teardown events
- MomoPlugin wiring, configured and unconfigured
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from momo_memory.client import MomoError
from momo_memory.hooks.manager import HookManager
from momo_memory.hooks.types import HookContext, HookEvent
from momo_memory.memory.context import CONTEXT_BEGIN, CONTEXT_END
from momo_memory.memory.hooks import MemoryHooks
from momo_memory.plugin import MomoPlugin, create_plugin


@pytest.fixture
def memory_hooks(populated_client, tags):
    hooks = MemoryHooks(populated_client, tags)
    yield hooks
    hooks.shutdown()


def chat(hooks, session_id="s1", message_id="m1", parts=None):
    parts = [] if parts is None else parts
    ctx = HookContext(event=HookEvent.ChatMessage, session_id=session_id, message_id=message_id, parts=parts)
    return hooks.on_chat_message(ctx), parts


class TestMemoryHooksRegistration:
    """Tests for hook registration with HookManager."""

    def test_register_all(self, memory_hooks):
        manager = HookManager()
        memory_hooks.register_all(manager)

        for event in HookEvent:
            assert manager.has_hooks(event)

    def test_unregister_all(self, memory_hooks):
        manager = HookManager()
        memory_hooks.register_all(manager)
        memory_hooks.unregister_all(manager)

        for event in HookEvent:
            assert manager.has_hooks(event) is False


class TestChatMessageHook:
    """Tests for context injection on the first message of a session."""

    def test_injects_context_part(self, memory_hooks, tags):
        existing = {"type": "text", "text": "hello"}
        result, parts = chat(memory_hooks, parts=[existing])

        assert result.metadata["context_injected"] is True
        assert len(parts) == 2
        assert parts[1] is existing

        part = parts[0]
        assert part["id"] == "momo-context-s1"
        assert part["message_id"] == "m1"
        assert part["synthetic"] is True
        assert part["text"].startswith(CONTEXT_BEGIN)
        assert part["text"].endswith(CONTEXT_END)
        assert "Backend developer." in part["text"]
        assert "- prefers tabs" in part["text"]
        assert "## Recent User Context\n- was debugging auth" in part["text"]
        assert "## Project Knowledge\n- uses postgres" in part["text"]

    def test_fetch_arguments(self, memory_hooks, populated_client, tags):
        chat(memory_hooks)

        populated_client.compute_profile.assert_called_once_with(
            tags.user, include_dynamic=True, generate_narrative=True
        )
        queries = {
            (call.args[0], tuple(call.args[1]), call.kwargs["limit"], call.kwargs["mode"])
            for call in populated_client.search.call_args_list
        }
        assert queries == {
            ("recent context", (tags.user,), 5, "hybrid"),
            ("project context", (tags.project,), 5, "hybrid"),
        }

    def test_injects_once_per_session(self, memory_hooks, populated_client):
        parts = []
        chat(memory_hooks, parts=parts)
        second, _ = chat(memory_hooks, parts=parts)

        assert second.metadata["context_injected"] is False
        assert len(parts) == 1
        assert populated_client.compute_profile.call_count == 1
        assert memory_hooks.is_injected("s1")

    def test_sessions_are_independent(self, memory_hooks):
        _, first = chat(memory_hooks, session_id="s1")
        _, second = chat(memory_hooks, session_id="s2")

        assert len(first) == 1
        assert len(second) == 1
        assert second[0]["id"] == "momo-context-s2"

    def test_concurrent_first_messages_inject_once(self, populated_client, tags):
        executor = ThreadPoolExecutor(max_workers=8)
        hooks = MemoryHooks(populated_client, tags)
        barrier = threading.Barrier(6)
        part_lists = [[] for _ in range(6)]

        def run(parts):
            barrier.wait()
            return chat(hooks, parts=parts)

        try:
            list(executor.map(run, part_lists))
        finally:
            executor.shutdown(wait=True)
            hooks.shutdown()

        assert sum(len(parts) for parts in part_lists) == 1
        assert populated_client.compute_profile.call_count == 1

    def test_all_backend_calls_fail(self, mock_client, tags):
        mock_client.compute_profile.side_effect = MomoError("down")
        mock_client.search.side_effect = MomoError("down")
        hooks = MemoryHooks(mock_client, tags)
        try:
            result, parts = chat(hooks)
        finally:
            hooks.shutdown()

        assert parts == []
        assert result.metadata["context_injected"] is False
        assert hooks.is_injected("s1")

    def test_partial_failure_still_injects(self, populated_client, tags):
        populated_client.compute_profile.side_effect = MomoError("profile down")
        hooks = MemoryHooks(populated_client, tags)
        try:
            result, parts = chat(hooks)
        finally:
            hooks.shutdown()

        assert result.metadata["context_injected"] is True
        assert "## User Profile" not in parts[0]["text"]
        assert "uses postgres" in parts[0]["text"]

    def test_empty_backend_injects_nothing(self, mock_client, tags):
        hooks = MemoryHooks(mock_client, tags)
        try:
            result, parts = chat(hooks)
        finally:
            hooks.shutdown()

        assert parts == []
        assert result.metadata["context_injected"] is False

    def test_missing_session_id(self, memory_hooks, populated_client):
        result, parts = chat(memory_hooks, session_id=None)
        assert parts == []
        populated_client.compute_profile.assert_not_called()


class TestSessionEvents:
    """Tests for compaction and teardown events."""

    def test_finished_summary_dispatches_ingestion(self, memory_hooks, populated_client, tags):
        memory_hooks.on_event(HookContext(event=HookEvent.SessionCompacted, session_id="s1"))
        result = memory_hooks.on_event(HookContext(
            event=HookEvent.MessageUpdated,
            session_id="s1",
            role="assistant",
            is_summary=True,
            is_finished=True,
        ))
        memory_hooks.shutdown(wait=True)

        assert result.metadata["ingestion_dispatched"] is True
        populated_client.ingest_conversation.assert_called_once()
        assert populated_client.ingest_conversation.call_args.kwargs["container_tag"] == tags.project

    def test_session_deleted_resets_injection(self, memory_hooks):
        chat(memory_hooks)
        memory_hooks.on_event(HookContext(event=HookEvent.SessionDeleted, session_id="s1"))

        assert memory_hooks.is_injected("s1") is False
        _, parts = chat(memory_hooks)
        assert len(parts) == 1

    def test_reset(self, memory_hooks):
        chat(memory_hooks)
        memory_hooks.on_event(HookContext(event=HookEvent.SessionCompacted, session_id="s1"))
        memory_hooks.reset()

        assert memory_hooks.is_injected("s1") is False
        assert memory_hooks.compaction.get_state("s1") is None


class TestMomoPlugin:
    """Tests for plugin wiring."""

    def test_unconfigured_plugin_does_nothing(self, tmp_path, mock_client):
        env = {"XDG_CONFIG_HOME": str(tmp_path / "xdg")}
        plugin = MomoPlugin(directory=str(tmp_path), environ=env, client=mock_client)

        assert plugin.is_configured is False
        parts = []
        plugin.chat_message("s1", "m1", parts)
        plugin.event({"type": "session.compacted", "properties": {"sessionID": "s1"}})
        plugin.close()

        assert parts == []
        mock_client.compute_profile.assert_not_called()
        mock_client.ingest_conversation.assert_not_called()

    def test_unconfigured_tool_reports_error(self, tmp_path):
        env = {"XDG_CONFIG_HOME": str(tmp_path / "xdg")}
        plugin = MomoPlugin(directory=str(tmp_path), environ=env)

        result, metadata = plugin.execute_tool("momo", '{"mode": "list"}')
        assert "Momo is not configured" in result["error"]
        assert metadata == {"tool": "momo"}

    def test_configured_plugin_injects_and_ingests(self, tmp_path, populated_client):
        env = {
            "XDG_CONFIG_HOME": str(tmp_path / "xdg"),
            "MOMO_API_KEY": "k",
            "MOMO_CONTAINER_TAG_USER": "user-tag",
            "MOMO_CONTAINER_TAG_PROJECT": "project-tag",
        }
        plugin = create_plugin(directory=str(tmp_path), environ=env, client=populated_client)
        assert plugin.is_configured
        assert plugin.tags.user == "user-tag"
        assert plugin.tags.project == "project-tag"

        parts = []
        plugin.chat_message("s1", "m1", parts)
        plugin.chat_message("s1", "m2", parts)
        assert len(parts) == 1

        plugin.event({"type": "session.compacted", "properties": {"sessionID": "s1"}})
        plugin.event({
            "type": "message.updated",
            "properties": {"info": {"id": "m3", "sessionID": "s1", "role": "assistant", "summary": True, "finish": "stop"}},
        })
        plugin.close(wait=True)

        populated_client.ingest_conversation.assert_called_once()
        assert populated_client.ingest_conversation.call_args.kwargs["container_tag"] == "project-tag"

    def test_chat_message_event_does_not_consume_injection(self, tmp_path, populated_client):
        env = {"XDG_CONFIG_HOME": str(tmp_path / "xdg"), "MOMO_API_KEY": "k"}
        plugin = MomoPlugin(directory=str(tmp_path), environ=env, client=populated_client)
        try:
            assert plugin.event({"type": "chat.message", "properties": {"sessionID": "s1"}}) is None
            parts = []
            plugin.chat_message("s1", "m1", parts)
        finally:
            plugin.close()

        assert len(parts) == 1
        assert populated_client.compute_profile.call_count == 1

    def test_unknown_event_ignored(self, tmp_path, mock_client):
        env = {"XDG_CONFIG_HOME": str(tmp_path / "xdg"), "MOMO_API_KEY": "k"}
        plugin = MomoPlugin(directory=str(tmp_path), environ=env, client=mock_client)
        try:
            assert plugin.event({"type": "file.edited", "properties": {}}) is None
        finally:
            plugin.close()

    def test_tool_definitions(self, tmp_path):
        plugin = MomoPlugin(directory=str(tmp_path), environ={"XDG_CONFIG_HOME": str(tmp_path)})
        names = [tool["function"]["name"] for tool in plugin.tool_definitions()]
        assert names == ["momo", "momo_ingest", "momo_ocr", "momo_transcribe"]
