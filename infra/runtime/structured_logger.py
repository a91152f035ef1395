from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any, TextIO


class StructuredLogger:
    """Prints one JSON object per log line. Debug lines need ``verbose=True``."""

    def __init__(self, *, verbose: bool = False, stream: TextIO | None = None) -> None:
        self._verbose = verbose
        self._stream = stream

    def debug(self, message: str, **fields: Any) -> None:
        if self._verbose:
            self._emit("debug", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit("error", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            "fields": fields,
        }
        print(json.dumps(payload, sort_keys=True, default=str), file=self._stream or sys.stdout)
