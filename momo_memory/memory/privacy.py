"""
Privacy redaction for user-supplied memory content.

Anything wrapped in <private>...</private> is removed before storage. Blocks
are matched non-greedily and may span lines. There is no nesting, and an
opening tag without a matching close tag is left in the text as-is.
"""

import re

PRIVATE_BLOCK = re.compile(r"<private>.*?</private>", re.DOTALL)


def strip_private_content(text: str) -> str:
    if not text:
        return ""
    return PRIVATE_BLOCK.sub("", text).strip()


def is_fully_private(text: str) -> bool:
    """True when nothing remains after redaction (including empty input)."""
    return not strip_private_content(text)
