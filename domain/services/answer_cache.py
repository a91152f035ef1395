from __future__ import annotations

from typing import Iterable

from domain.models import AnswerRecord
from domain.ports import AnswerRepositoryPort, LoggerPort
from domain.utils import normalize_text


class AnswerCache:
    """
    Session-scoped store of answers keyed by ``field_type:question``.

    One instance belongs to one wizard session and is passed explicitly to
    every handler. When a repository is given, each write is also saved
    there so answers survive across sessions.
    """

    def __init__(
        self,
        *,
        records: Iterable[AnswerRecord] = (),
        repository: AnswerRepositoryPort | None = None,
        logger: LoggerPort | None = None,
    ) -> None:
        self._entries: dict[str, AnswerRecord] = {}
        self._repository = repository
        self._logger = logger
        for record in records:
            self._store(record)

    @classmethod
    def from_repository(
        cls,
        repository: AnswerRepositoryPort,
        *,
        logger: LoggerPort | None = None,
    ) -> AnswerCache:
        return cls(records=repository.list_all(), repository=repository, logger=logger)

    @staticmethod
    def make_key(field_type: str, question: str) -> str:
        return f"{field_type.lower()}:{normalize_text(question)}"

    def get(self, field_type: str, question: str) -> str | None:
        """Exact key lookup, else substring match within the same field type."""
        key = self.make_key(field_type, question)
        exact = self._entries.get(key)
        if exact is not None:
            return exact.value

        wanted_type = field_type.lower()
        wanted = normalize_text(question)
        if not wanted:
            return None
        for record in self._entries.values():
            if record.field_type != wanted_type or not record.question:
                continue
            if wanted in record.question or record.question in wanted:
                return record.value
        return None

    def remember(self, field_type: str, question: str, value: str) -> AnswerRecord:
        record = AnswerRecord(
            field_type=field_type.lower(),
            question=normalize_text(question),
            value=value,
        )
        self._store(record)
        if self._repository is not None:
            try:
                self._repository.save(record)
            except Exception as exc:
                if self._logger is not None:
                    self._logger.warning(
                        "answer_persist_failed",
                        key=record.key,
                        error=str(exc),
                    )
        return record

    def forget(self, field_type: str, question: str) -> bool:
        return self._entries.pop(self.make_key(field_type, question), None) is not None

    def records(self) -> list[AnswerRecord]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _store(self, record: AnswerRecord) -> None:
        self._entries[record.key] = record
