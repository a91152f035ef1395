from __future__ import annotations


class WizardError(Exception):
    """Base class for errors raised by the wizard core."""


class NavigationError(WizardError):
    """The wizard could not be advanced; the session should be abandoned."""

    def __init__(self, message: str, *, state: str | None = None) -> None:
        super().__init__(message)
        self.state = state


class ConfigError(WizardError):
    """Configuration files are missing or invalid."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "invalid configuration")
        self.errors = list(errors)
