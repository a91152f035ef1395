"""SQLite-backed persistence adapters for domain repository ports."""

from .sqlite_answer_repository import SQLiteAnswerRepository

__all__ = ["SQLiteAnswerRepository"]
