"""
Host Lifecycle Hooks Module

This module maps the host's session events onto plugin handlers.
Handlers are plain Python callables run at specific points in the host's
session lifecycle.

Available Hook Events:
- ChatMessage: A user message is being sent; context parts may be prepended
- SessionCompacted: The host compacted a session's conversation
- MessageUpdated: A message changed state (summary messages finish here)
- SessionDeleted: The host destroyed a session

Example usage:
    from momo_memory.hooks import HookManager, HookEvent

    hooks = HookManager()

    @hooks.on(HookEvent.SessionCompacted)
    def on_compacted(context):
        print(f"Session {context.session_id} compacted")
"""

from .types import HookEvent, HookContext, HookResult
from .manager import HookManager

__all__ = ['HookEvent', 'HookContext', 'HookResult', 'HookManager']
