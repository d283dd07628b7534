"""Structured logging - JSON lines with secret redaction.

One logger per module name. ``error`` lines carry the call stack (and the
exception traceback when one is passed) so faults can be traced without a
debugger attached. DEBUG lines are dropped in production.
"""

from __future__ import annotations

import json
import os
import sys
import threading
import time
import traceback
from typing import Any, Optional

from getback.security.redact import redact_sensitive

_TRUTHY = {"1", "true", "yes", "on"}


def _production_mode() -> bool:
    return os.getenv("GETBACK_PRODUCTION", "").strip().lower() in _TRUTHY


class StructuredLogger:
    """Leveled JSON-line logger (INFO / DEBUG / ERROR)."""

    def __init__(self, module: str, output=None, debug_enabled: Optional[bool] = None):
        self.module = module
        self._output = output
        self._debug_enabled = (not _production_mode()) if debug_enabled is None else debug_enabled
        self._write_lock = threading.Lock()

    def _emit(self, level: str, event: str, message: str, data: dict[str, Any]) -> None:
        record = {
            "level": level,
            "module": self.module,
            "event": event,
            "message": message,
            "timestamp": time.time(),
            **data,
        }
        output = self._output or sys.stderr
        try:
            line = redact_sensitive(json.dumps(record, ensure_ascii=False, default=str))
            with self._write_lock:
                output.write(line + "\n")
                output.flush()
        except Exception as exc:
            # Last-resort fallback to avoid silent logger failures.
            try:
                fallback = {
                    "level": "ERROR",
                    "module": self.module,
                    "event": "logger_internal_error",
                    "timestamp": time.time(),
                    "error": str(exc),
                }
                sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")
                sys.stderr.flush()
            except Exception:
                return

    def info(self, event: str, message: str = "", **extra: Any) -> None:
        self._emit("INFO", event, message, extra)

    def debug(self, event: str, message: str = "", **extra: Any) -> None:
        if not self._debug_enabled:
            return
        self._emit("DEBUG", event, message, extra)

    def error(
        self,
        event: str,
        message: str = "",
        *,
        exc: BaseException | None = None,
        **extra: Any,
    ) -> None:
        # drop this frame and _emit from the captured stack
        extra["stack"] = "".join(traceback.format_stack()[:-1])
        if exc is not None:
            extra["exception"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._emit("ERROR", event, message, extra)


_loggers: dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(module: str) -> StructuredLogger:
    with _loggers_lock:
        logger = _loggers.get(module)
        if logger is None:
            logger = StructuredLogger(module)
            _loggers[module] = logger
        return logger


__all__ = ["StructuredLogger", "get_logger"]
