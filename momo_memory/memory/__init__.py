"""
Session memory orchestration for Momo.

Provides the pieces that connect a coding-agent host to Momo memory:
- Container tag derivation (user / project namespaces)
- Privacy redaction of <private> content
- Context formatting for injection into new sessions
- Compaction tracking with a per-session cooldown
- Ingestion status polling

All session tracking is in-memory and lasts as long as the plugin instance.
"""

from .compaction import CompactionTracker, CompactionState, COMPACTION_COOLDOWN_MS
from .context import format_context_for_prompt, strip_injected_context
from .hooks import MemoryHooks
from .ingestion import IngestionPoller
from .privacy import strip_private_content, is_fully_private
from .session import SessionStore
from .tags import ContainerTags, derive_tags, simple_hash

__all__ = [
    "CompactionTracker",
    "CompactionState",
    "COMPACTION_COOLDOWN_MS",
    "format_context_for_prompt",
    "strip_injected_context",
    "MemoryHooks",
    "IngestionPoller",
    "strip_private_content",
    "is_fully_private",
    "SessionStore",
    "ContainerTags",
    "derive_tags",
    "simple_hash",
]
