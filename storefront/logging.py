"""
Centralized logging helpers for the storefront client.

Importing the package never touches the root logger; applications (the CLI
included) opt in with ``setup_logging()``.

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart refreshed")
    logger.error("Failed to add item", exc_info=True)
"""

import logging
import os
import sys
from functools import cache
from typing import Optional, TextIO

# Default format for logs
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"


def _get_log_level() -> int:
    """Get log level from environment or default to INFO."""
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def setup_logging(stream: Optional[TextIO] = None) -> None:
    """
    Configure the root logger for an application entry point.

    Args:
        stream: Handler stream (default: stderr, keeping stdout for output)
    """
    root = logging.getLogger()

    # Only configure if no handlers exist
    if root.handlers:
        return

    root.setLevel(_get_log_level())

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(_get_log_level())

    # Terse format for the CLI, detailed otherwise
    simple = os.environ.get("STOREFRONT_LOG_SIMPLE") == "1"
    formatter = logging.Formatter(LOG_FORMAT_SIMPLE if simple else LOG_FORMAT)
    handler.setFormatter(formatter)

    root.addHandler(handler)

    # Every backend call goes through httpx; keep its request lines out of INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@cache
def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def _escape_log_injection(value: str) -> str:
    """
    Escape characters that could be used for log injection attacks (CWE-117).

    Args:
        value: String to escape

    Returns:
        Escaped string safe for logging
    """
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: Optional[str]) -> str:
    """
    Sanitize an id or token for logging: escaped and cut to its first 8 chars.

    Args:
        id_value: Value to sanitize (can be None)

    Returns:
        Sanitized string (first 8 chars) or "N/A" if empty
    """
    if not id_value:
        return "N/A"
    safe_value = _escape_log_injection(str(id_value))
    return safe_value[:8] if len(safe_value) > 8 else safe_value


def sanitize_string_for_logging(value: Optional[str], max_length: int = 50) -> str:
    """
    Sanitize a user-controlled string for logging.

    Args:
        value: String value to sanitize (can be None)
        max_length: Maximum length to keep (default: 50)

    Returns:
        Sanitized string or "N/A" if empty
    """
    if not value:
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "setup_logging",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
