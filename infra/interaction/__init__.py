from .console_status_observer import ConsoleStatusObserver

__all__ = ["ConsoleStatusObserver"]
