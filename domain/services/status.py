from __future__ import annotations

from typing import Any

from domain.models import StatusUpdate, WizardStats
from domain.ports import LoggerPort, StatusObserverPort


class StatusReporter:
    """Publishes stage/activity updates with a stats snapshot to an observer."""

    def __init__(
        self,
        observer: StatusObserverPort | None = None,
        *,
        logger: LoggerPort | None = None,
    ) -> None:
        self._observer = observer
        self._logger = logger
        self.stats = WizardStats()
        self.history: list[StatusUpdate] = []

    def publish(self, stage: str, activity: str, message: str = "", **details: Any) -> StatusUpdate:
        update = StatusUpdate(
            stage=stage,
            activity=activity,
            message=message,
            details=details,
            stats=self.stats.snapshot(),
        )
        self.history.append(update)
        if self._observer is not None:
            try:
                self._observer.publish(update)
            except Exception as exc:
                if self._logger is not None:
                    self._logger.warning("status_observer_failed", stage=stage, error=str(exc))
        return update
