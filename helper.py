# Environment helpers for the command line entry point.

from typing import Optional

from dotenv import load_dotenv, find_dotenv


def load_env():
    """Load a .env file found from the current directory without overriding the real environment."""
    _ = load_dotenv(find_dotenv(usecwd=True), override=False)


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Render a secret for display, keeping only its last few characters."""
    if not value:
        return "(not set)"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
