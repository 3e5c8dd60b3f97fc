"""Parsing and normalization helpers for configuration values."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _try_parse_int(value: Any, *, name: str, minimum: int = 0) -> Optional[int]:
    """Parse a non-negative integer setting, or warn and return None."""
    if isinstance(value, bool):
        logger.warning("Invalid %s '%s'. Expected an integer; ignoring.", name, value)
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        logger.warning("Invalid %s '%s'. Expected an integer; ignoring.", name, value)
        return None
    if parsed < minimum:
        logger.warning("Invalid %s %d. Must be >= %d; ignoring.", name, parsed, minimum)
        return None
    return parsed


def _normalize_log_level(value: str) -> str:
    normalized = str(value).strip().upper()
    if normalized not in _VALID_LOG_LEVELS:
        logger.warning(
            "Invalid log level '%s'. Falling back to 'INFO'. Valid options: %s",
            value,
            ", ".join(sorted(_VALID_LOG_LEVELS)),
        )
        return "INFO"
    return normalized
