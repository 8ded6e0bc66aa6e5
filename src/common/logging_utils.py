"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; this module owns
root configuration and the structured ``extra=`` context attached to debug
traces so that log records from the parser, evaluator and resolver share the
same field names.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

# Fields every structured record is expected to carry, in rendering order.
_CONTEXT_FIELDS = ("event", "component", "action", "outcome", "target", "duration_ms")


class _ContextFormatter(logging.Formatter):
    """Formatter appending structured context when DEBUG is active."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = getattr(record, "context", None)
        if not context or not logging.getLogger().isEnabledFor(logging.DEBUG):
            return base
        parts = [f"{k}={context[k]}" for k in _CONTEXT_FIELDS if k in context]
        parts.extend(f"{k}={v}" for k, v in sorted(context.items()) if k not in _CONTEXT_FIELDS)
        return f"{base} [{' '.join(parts)}]"


def _level_from_env() -> int:
    level_name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").upper()
    level = getattr(logging, level_name, None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    if level is None:
        level = _level_from_env()
    existing = [h for h in root.handlers if getattr(h, "_peergate", False)]
    if existing:
        # Repeated in-process runs must follow a replaced sys.stderr.
        existing[0].setStream(sys.stderr)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_ContextFormatter(Constants.LOG_FORMAT))
        handler._peergate = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when ``logger`` would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra=`` mapping for a structured log call.

    None values are dropped so records only carry the fields that were set.
    """
    return {"context": {k: v for k, v in fields.items() if v is not None}}


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
