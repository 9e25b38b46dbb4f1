# viewprobe/tracelogger.py
"""
@file tracelogger.py
@brief Trace output for searches, waits and the inspection channel.

Each event is one line: "[status] [trace] time=... event=... path=... k=v".
Lines go to stdout and, when a trace file is set, are appended to it. They
are also forwarded to the "viewprobe.trace" logger at debug level.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Dict, Optional

log = logging.getLogger("viewprobe.trace")


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class TraceLogger:
    """Process-wide trace sink, switched on directly or by InspectConfig.trace_enabled."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._file_path: Optional[str] = None

    def enable(self, file_path: Optional[str] = None) -> None:
        """
        Turn tracing on.

        @param file_path Also append trace lines to this file
        """
        with self._lock:
            self._enabled = True
            if file_path is not None:
                self._file_path = os.path.abspath(file_path)

    def disable(self) -> None:
        """Turn tracing off and forget the trace file."""
        with self._lock:
            self._enabled = False
            self._file_path = None

    @property
    def file_path(self) -> Optional[str]:
        return self._file_path

    def is_enabled(self) -> bool:
        if self._enabled:
            return True
        from .config import InspectConfig

        return InspectConfig.current().trace_enabled

    def log(
        self,
        *,
        event: str,
        path: Optional[str] = None,
        status: str = "info",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Emit one trace event; a no-op unless tracing is enabled."""
        if not self.is_enabled():
            return

        parts = [f"[{status.lower()}]", "[trace]", f"time={time.strftime('%H:%M:%S')}", f"event={event}"]
        if path:
            parts.append(f"path={path}")
        parts.extend(f"{key}={_render(value)}" for key, value in (metadata or {}).items())
        line = " ".join(parts)

        log.debug(line)
        print(line, flush=True)
        if self._file_path:
            self._append(line)

    def _append(self, line: str) -> None:
        with self._lock:
            try:
                os.makedirs(os.path.dirname(self._file_path), exist_ok=True)
                with open(self._file_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as e:
                log.warning("Cannot write trace file %s: %s", self._file_path, e)


TRACE_LOGGER = TraceLogger()
