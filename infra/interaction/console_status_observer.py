from __future__ import annotations

import sys
from typing import TextIO

from domain.models import StatusUpdate


class ConsoleStatusObserver:
    """Prints wizard progress lines to stdout (StatusObserverPort)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def publish(self, update: StatusUpdate) -> None:
        line = f"[{update.stage}] {update.activity}"
        if update.message:
            line += f": {update.message}"
        if update.details:
            extras = ", ".join(f"{key}={value}" for key, value in sorted(update.details.items()))
            line += f" ({extras})"
        print(line, file=self._stream or sys.stdout)
