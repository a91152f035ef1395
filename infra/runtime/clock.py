from __future__ import annotations

import uuid
from datetime import datetime, timezone

from domain.ports import ClockPort


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class TimestampRunIdGenerator:
    """Run ids that sort by start time, e.g. ``run-20240501-093000-3f2a1c``."""

    def __init__(self, clock: ClockPort | None = None) -> None:
        self._clock = clock or SystemClock()

    def new_run_id(self) -> str:
        stamp = self._clock.now().strftime("%Y%m%d-%H%M%S")
        return f"run-{stamp}-{uuid.uuid4().hex[:6]}"
