from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any, TextIO


class StructuredLogger:
    """One JSON object per line: ``ts``, ``level``, ``message``, ``fields``."""

    def __init__(self, *, component: str | None = None, stream: TextIO | None = None) -> None:
        self._component = component
        self._stream = stream

    def bind(self, component: str) -> "StructuredLogger":
        return StructuredLogger(component=component, stream=self._stream)

    def info(self, message: str, **fields: Any) -> None:
        self._emit("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit("error", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            "fields": fields,
        }
        if self._component:
            payload["component"] = self._component
        # field values may be dates or paths
        print(json.dumps(payload, sort_keys=True, default=str), file=self._stream or sys.stdout)
