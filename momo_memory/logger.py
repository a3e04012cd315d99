"""
Logging setup for the Momo memory plugin.

All modules log through the single ``momo`` logger exported here, with a
bracketed component prefix in each message (e.g. ``[hooks]``, ``[compaction]``).
"""

import json
import logging
import os
from typing import Any, Optional

LOG_LEVEL_ENV = "MOMO_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("momo")


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Level name (e.g. "DEBUG"). Falls back to $MOMO_LOG_LEVEL, then WARNING.

    Returns:
        The configured logger
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


def log_tool_call(name: str, arguments: Any, result: Any) -> None:
    """Log a tool invocation and a short preview of its result."""
    try:
        args_str = json.dumps(arguments, default=str)
    except (TypeError, ValueError):
        args_str = str(arguments)
    preview = str(result)
    if len(preview) > 200:
        preview = preview[:200] + "..."
    logger.debug(f"[tools] {name}({args_str}) -> {preview}")
