from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Sequence

from domain.models import AnswerRecord
from domain.ports import ClockPort


class SQLiteAnswerRepository:
    """SQLite-backed implementation of ``AnswerRepositoryPort``.

    Rows are keyed by ``(field_type, question)``; saving an existing key
    replaces its value.
    """

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS answers (
        field_type TEXT NOT NULL,
        question   TEXT NOT NULL,
        value      TEXT NOT NULL,
        updated_at TEXT,
        PRIMARY KEY (field_type, question)
    );
    """

    def __init__(self, db_path: str = ":memory:", *, clock: ClockPort | None = None) -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._SCHEMA_SQL)
        self._clock = clock

    def __enter__(self) -> "SQLiteAnswerRepository":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def save(self, record: AnswerRecord) -> None:
        updated_at = None
        if self._clock is not None:
            now = self._clock.now()
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            updated_at = now.isoformat()
        self._conn.execute(
            "INSERT INTO answers (field_type, question, value, updated_at) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(field_type, question) DO UPDATE SET "
            "value=excluded.value, updated_at=excluded.updated_at",
            (record.field_type, record.question, record.value, updated_at),
        )
        self._conn.commit()

    def list_all(self) -> Sequence[AnswerRecord]:
        rows = self._conn.execute(
            "SELECT field_type, question, value FROM answers ORDER BY field_type, question",
        ).fetchall()
        return [AnswerRecord(field_type=row[0], question=row[1], value=row[2]) for row in rows]

    def updated_at(self, field_type: str, question: str) -> datetime | None:
        row = self._conn.execute(
            "SELECT updated_at FROM answers WHERE field_type = ? AND question = ?",
            (field_type, question),
        ).fetchone()
        if not row or not row[0]:
            return None
        return datetime.fromisoformat(row[0])

    def delete(self, field_type: str, question: str) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM answers WHERE field_type = ? AND question = ?",
            (field_type, question),
        )
        self._conn.commit()
        return cursor.rowcount > 0

    def close(self) -> None:
        self._conn.close()
