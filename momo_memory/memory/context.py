"""
Formatting of memory context for injection into a chat session.

Profile and memory snippets are rendered as markdown sections inside a single
block delimited by begin/end markers, so the injected text can be recognised
and stripped again later.
"""

import re
from typing import List, Optional

from ..models import MemoryItem, ProfileData

CONTEXT_BEGIN = "[MOMO MEMORY - Context from previous sessions]"
CONTEXT_END = "[END MOMO MEMORY]"
CONTEXT_SOURCE = "momo-memory"

_CONTEXT_BLOCK = re.compile(re.escape(CONTEXT_BEGIN) + r".*?" + re.escape(CONTEXT_END), re.DOTALL)


def _format_memories(memories: List[MemoryItem]) -> str:
    lines = []
    for m in memories:
        if not m.content:
            continue
        type_label = f" [{m.memory_type}]" if m.memory_type else ""
        lines.append(f"- {m.content}{type_label}")
    return "\n".join(lines)


def format_context_for_prompt(
    profile: Optional[ProfileData],
    user_memories: List[MemoryItem],
    project_memories: List[MemoryItem],
) -> str:
    """
    Build the injectable context block.

    Sections appear in a fixed order and only when non-empty:
    profile summary, known preferences, user memories, project memories.

    Args:
        profile: Profile summary and traits, or None
        user_memories: Memories from the user scope, in display order
        project_memories: Memories from the project scope, in display order

    Returns:
        The wrapped block, or "" when there is nothing to inject
    """
    sections = []

    if profile and profile.summary:
        sections.append(f"## User Profile\n{profile.summary}")

    if profile and profile.traits:
        traits = "\n".join(f"- {t}" for t in profile.traits)
        sections.append(f"## Known Preferences\n{traits}")

    user_lines = _format_memories(user_memories)
    if user_lines:
        sections.append(f"## Recent User Context\n{user_lines}")

    project_lines = _format_memories(project_memories)
    if project_lines:
        sections.append(f"## Project Knowledge\n{project_lines}")

    if not sections:
        return ""

    body = "\n\n".join(sections)
    return f"{CONTEXT_BEGIN}\n\n{body}\n\n{CONTEXT_END}"


def strip_injected_context(text: str) -> str:
    """Remove any injected memory block from text."""
    if not text:
        return ""
    return _CONTEXT_BLOCK.sub("", text).strip()


def build_context_part(session_id: str, message_id: Optional[str], text: str) -> dict:
    """Synthetic text part carrying the context block, in the host's message-part shape."""
    return {
        "id": f"momo-context-{session_id}",
        "session_id": session_id,
        "message_id": message_id or "",
        "type": "text",
        "text": text,
        "synthetic": True,
        "metadata": {"source": CONTEXT_SOURCE},
    }
