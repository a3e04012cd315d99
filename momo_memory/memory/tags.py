"""
Container tag derivation.

Memories are partitioned by container tag: one per user (shared across
projects) and one per project directory. Tags are derived deterministically
so the same user/directory maps to the same namespace in every process.
"""

import getpass
import os
import re
import struct
from dataclasses import dataclass
from typing import Optional

USER_TAG_PREFIX = "opencode-user-"
PROJECT_TAG_PREFIX = "ocp-"
UNKNOWN_USER = "unknown"

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def simple_hash(value: str) -> str:
    """
    djb2-style 32-bit string hash (h = h * 33 XOR code), rendered as hex.

    Iterates over UTF-16 code units so results match tags created by the
    JavaScript tooling for non-ASCII paths.
    """
    data = value.encode("utf-16-le")
    h = 5381
    for code in struct.unpack(f"<{len(data) // 2}H", data):
        h = ((h * 33) ^ code) & 0xFFFFFFFF
    return format(h, "x")


def _short_hash(value: str) -> str:
    return simple_hash(value).rjust(8, "0")[-8:]


def slugify(value: str) -> str:
    slug = _SLUG_INVALID.sub("-", value.lower()).strip("-")
    return slug[:80]


def current_username() -> str:
    try:
        return getpass.getuser() or UNKNOWN_USER
    except (KeyError, OSError, ImportError):
        return UNKNOWN_USER


def user_tag(username: Optional[str] = None) -> str:
    return f"{USER_TAG_PREFIX}{simple_hash(username or current_username())}"


def project_tag(directory: str) -> str:
    """Readable, collision-resistant tag: ocp-<slug of basename>-<8 hex of full path>."""
    directory = directory or "."
    name = os.path.basename(directory.rstrip("/\\"))
    slug = slugify(name) or "project"
    return f"{PROJECT_TAG_PREFIX}{slug}-{_short_hash(directory)}"


@dataclass(frozen=True)
class ContainerTags:
    user: str
    project: str

    def resolve(self, scope: Optional[str] = None) -> str:
        """Map a scope to its tag. Anything other than "user" means the project."""
        if scope == "user":
            return self.user
        return self.project


def derive_tags(
    directory: str,
    container_tag_user: Optional[str] = None,
    container_tag_project: Optional[str] = None,
    username: Optional[str] = None,
) -> ContainerTags:
    """
    Derive the user and project tags, honoring explicit overrides.

    Args:
        directory: Project directory the project tag is derived from
        container_tag_user: Override used verbatim for the user tag
        container_tag_project: Override used verbatim for the project tag
        username: Account name (defaults to the current OS user)

    Returns:
        ContainerTags for both scopes
    """
    return ContainerTags(
        user=container_tag_user or user_tag(username),
        project=container_tag_project or project_tag(directory),
    )
