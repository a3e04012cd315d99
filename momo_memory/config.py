"""
Configuration resolution for the Momo memory plugin.

Each field is resolved independently with the precedence:

    environment variable > project-local file > global file > built-in default

Config files are JSON with comments and trailing commas allowed (JSONC).
Unreadable or malformed files contribute nothing; they never raise.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from .logger import logger

DEFAULT_BASE_URL = "http://localhost:3000"

CONFIG_FILENAME = "momo.jsonc"
PROJECT_CONFIG_FILENAMES = (".momo.jsonc", "momo.jsonc")

ENV_API_KEY = "MOMO_API_KEY"
ENV_BASE_URL = "MOMO_BASE_URL"
ENV_CONTAINER_TAG_USER = "MOMO_CONTAINER_TAG_USER"
ENV_CONTAINER_TAG_PROJECT = "MOMO_CONTAINER_TAG_PROJECT"

# field name -> (environment variable, key in config files)
CONFIG_FIELDS: Dict[str, tuple] = {
    "api_key": (ENV_API_KEY, "apiKey"),
    "base_url": (ENV_BASE_URL, "baseUrl"),
    "container_tag_user": (ENV_CONTAINER_TAG_USER, "containerTagUser"),
    "container_tag_project": (ENV_CONTAINER_TAG_PROJECT, "containerTagProject"),
}


@dataclass(frozen=True)
class MomoConfig:
    """Effective configuration snapshot."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    container_tag_user: Optional[str] = None
    container_tag_project: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


def get_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the process-wide config directory ($XDG_CONFIG_HOME/opencode or ~/.config/opencode)."""
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "opencode"
    return Path.home() / ".config" / "opencode"


def strip_jsonc_comments(text: str) -> str:
    """
    Strip // and /* */ comments and trailing commas from JSONC text.

    String literals are copied untouched, so "https://..." values survive.

    Args:
        text: Raw JSONC document

    Returns:
        Text that a strict JSON parser accepts (if the input was otherwise valid)
    """
    out = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            if end == -1:
                break
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                break
            i = end + 2
        else:
            out.append(ch)
            i += 1

    return _strip_trailing_commas("".join(out))


def _strip_trailing_commas(text: str) -> str:
    """Drop commas that are directly followed (modulo whitespace) by } or ]."""
    out = []
    n = len(text)
    in_string = False
    i = 0

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j >= n or text[j] not in "}]":
                out.append(ch)
        else:
            out.append(ch)
        i += 1

    return "".join(out)


def read_jsonc_file(path: Path) -> dict:
    """
    Read a JSONC config file.

    Returns an empty dict for a missing, unreadable, malformed or non-object file.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
        parsed = json.loads(strip_jsonc_comments(raw))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.debug(f"[config] Ignoring unreadable config {path}: {e}")
        return {}

    if not isinstance(parsed, dict):
        logger.debug(f"[config] Ignoring non-object config {path}")
        return {}
    return parsed


def read_global_config(environ: Optional[Mapping[str, str]] = None) -> dict:
    return read_jsonc_file(get_config_dir(environ) / CONFIG_FILENAME)


def read_project_config(directory: Optional[str] = None) -> dict:
    """Read <directory>/.momo.jsonc, falling back to <directory>/momo.jsonc."""
    if not directory:
        return {}

    for name in PROJECT_CONFIG_FILENAMES:
        path = Path(directory) / name
        if path.exists():
            return read_jsonc_file(path)
    return {}


def _file_value(source: dict, key: str) -> Optional[str]:
    value = source.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def load_config(
    directory: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MomoConfig:
    """
    Resolve the effective configuration.

    Args:
        directory: Project directory searched for a project-local config file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        An immutable MomoConfig
    """
    env = os.environ if environ is None else environ
    sources = [read_project_config(directory), read_global_config(env)]

    values = {}
    for field_name, (env_var, file_key) in CONFIG_FIELDS.items():
        value = env.get(env_var) or None
        for source in sources:
            if value is not None:
                break
            value = _file_value(source, file_key)
        if value is not None:
            values[field_name] = value

    return MomoConfig(**values)


def is_configured(
    directory: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """True iff the resolved API key is present and non-empty."""
    return load_config(directory, environ).is_configured
