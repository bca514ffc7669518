"""
Logging setup shared by every medstore module.

Usage:
    from medstore.logging import get_logger, describe_product_for_logging
    logger = get_logger(__name__)

    logger.info(f"Added 2 x {describe_product_for_logging(ref, name)} to cart")

Environment:
- LOG_LEVEL: threshold for the stdout handler (default: INFO)
- MEDSTORE_ENV: "production" drops timestamps (the host adds its own)

Product names, identifiers and payload excerpts come from the catalog or
from saved carts, so they go through the sanitizers below before being
interpolated into a log line.
"""

import logging
import os
import re
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Loggers of the HTTP stack under the Upstash client
QUIET_LOGGERS = ("httpx", "httpcore")

_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _get_log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def _is_production() -> bool:
    return os.environ.get("MEDSTORE_ENV", "").strip().lower() == "production"


def _configure_root_logger() -> None:
    """Attach a stdout handler to the root logger unless the host already did."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = _get_log_level()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if _is_production() else LOG_FORMAT))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# Configure once on module import
_configure_root_logger()


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
    """Escape line breaks and tabs, drop other control characters (CWE-117)."""
    return _CONTROL_CHARS.sub(lambda m: _ESCAPES.get(m.group(), ""), value)


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    Escape a product reference and keep its first 8 characters.

    Returns "N/A" for None or an empty value.
    """
    if not id_value:
        return "N/A"
    return _escape_log_injection(str(id_value))[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """
    Escape free text (product names, error excerpts) and cap its length.

    Args:
        value: Text to sanitize (can be None)
        max_length: Characters kept before an ellipsis is appended

    Returns:
        Sanitized text or "N/A" if empty
    """
    if not value:
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


def describe_product_for_logging(product_ref: str | None, name: str | None) -> str:
    """Render a cart row as ``name (ref)`` for log lines."""
    return f"{sanitize_string_for_logging(name)} ({sanitize_id_for_logging(product_ref)})"


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
    "describe_product_for_logging",
]
