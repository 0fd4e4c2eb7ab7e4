"""
Runtime settings, read from the environment.

Values are read on each call, so variables loaded from .env.local and .env by
python-dotenv apply even when the engine was imported first.
"""

import os


def max_workers() -> int:
    return int(os.getenv("AMENDMENT_ENGINE_MAX_WORKERS", "4"))


def log_level() -> str:
    return os.getenv("AMENDMENT_ENGINE_LOG_LEVEL", "INFO")


def preview_length() -> int:
    """Length of block previews in navigation errors and log lines."""
    return int(os.getenv("AMENDMENT_ENGINE_PREVIEW_LENGTH", "80"))
