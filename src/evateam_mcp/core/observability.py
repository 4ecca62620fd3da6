from __future__ import annotations

import logging
from typing import Any, Dict

# Attributes every LogRecord already carries, plus those set by Formatter
RESERVED_LOG_KEYS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys that would collide with LogRecord attributes."""
    return {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}


def log_event(
    event: str,
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Minimal structured logging helper.
    - Passes fields as `extra` so formatters can include keys.
    - Drops reserved LogRecord attributes to avoid collisions.
    """
    log = logger or logging.getLogger("evateam_mcp.observability")
    log.log(level, event, extra=clean_fields(fields))


__all__ = ["log_event", "clean_fields", "RESERVED_LOG_KEYS"]
