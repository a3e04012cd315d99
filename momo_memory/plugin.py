"""
Momo memory plugin

Wires configuration, container tags, memory hooks and tools together for
one host project. The host calls ``chat_message`` before sending a user
message, ``event`` for every session event, and ``execute_tool`` for tool calls.
"""

import os
from typing import Any, Dict, List, Mapping, Optional

from .client import MemoryBackend, MomoClient
from .config import MomoConfig, load_config
from .hooks import HookContext, HookEvent, HookManager, HookResult
from .logger import logger
from .memory.hooks import MemoryHooks
from .memory.tags import ContainerTags, derive_tags
from .tools import MomoTools, execute_tool
from .tools_schemas import tools_schemas


class MomoPlugin:
    """
    Persistent memory for a coding-agent host.

    Configuration and tags are resolved once, at construction. Without an API
    key the memory hooks are not registered, so background paths do nothing
    and user-invoked tools fail with NotConfiguredError.
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        client: Optional[MemoryBackend] = None,
        hook_manager: Optional[HookManager] = None,
        username: Optional[str] = None,
    ):
        """
        Initialize the plugin.

        Args:
            directory: Project directory (default: current directory)
            environ: Environment mapping (default: os.environ)
            client: Backend client to use instead of building a MomoClient
            hook_manager: HookManager to register with (default: a new one)
            username: Account name for the user tag (default: current OS user)
        """
        self.directory = directory or os.getcwd()
        self.config: MomoConfig = load_config(self.directory, environ)
        self.tags: ContainerTags = derive_tags(
            self.directory,
            container_tag_user=self.config.container_tag_user,
            container_tag_project=self.config.container_tag_project,
            username=username,
        )

        self.client: Optional[MemoryBackend] = None
        if self.config.is_configured:
            self.client = client or MomoClient(self.config.base_url, api_key=self.config.api_key)

        self.hooks = hook_manager or HookManager()
        self.memory_hooks: Optional[MemoryHooks] = None
        if self.client is not None:
            self.memory_hooks = MemoryHooks(self.client, self.tags)
            self.memory_hooks.register_all(self.hooks)
        else:
            logger.info("[plugin] Momo is not configured; memory hooks disabled")

        self.tools = MomoTools(self.client, self.tags)

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def chat_message(
        self,
        session_id: str,
        message_id: Optional[str],
        parts: List[dict],
    ) -> HookResult:
        """Run the chat message hook. At most one context part is prepended to ``parts`` per session."""
        return self.hooks.trigger(
            HookEvent.ChatMessage,
            session_id=session_id,
            message_id=message_id,
            parts=parts,
        )

    def event(self, event: Dict[str, Any]) -> Optional[HookResult]:
        """Run the event hook for a raw host event. Unknown event types are ignored."""
        context = HookContext.from_event(event)
        if context is None:
            return None
        return self.hooks.trigger(context.event, context)

    def tool_definitions(self) -> List[dict]:
        return tools_schemas

    def execute_tool(self, name: str, args: str) -> tuple:
        return execute_tool(name, args, self.tools.registry())

    def close(self, wait: bool = True) -> None:
        """Unregister hooks and stop background workers."""
        if self.memory_hooks is not None:
            self.memory_hooks.unregister_all(self.hooks)
            self.memory_hooks.shutdown(wait=wait)


def create_plugin(**kwargs) -> MomoPlugin:
    """
    Factory function to create a MomoPlugin instance.

    Args:
        **kwargs: Arguments to pass to MomoPlugin constructor

    Returns:
        A configured MomoPlugin instance
    """
    return MomoPlugin(**kwargs)
