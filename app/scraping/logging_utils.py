"""
Structured logging helpers for crawl workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Fields whose value is None are dropped. Level checks happen before
    serialization so debug events cost nothing when disabled.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event}
    payload.update({key: value for key, value in fields.items() if value is not None})
    logger.log(level, json.dumps(payload, default=str, sort_keys=True, ensure_ascii=False))
