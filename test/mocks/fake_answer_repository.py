from __future__ import annotations

from domain import AnswerRecord, AnswerRepositoryPort


class InMemoryAnswerRepository:
    def __init__(self, records: list[AnswerRecord] | None = None, *, fail_on_save: bool = False) -> None:
        self._records: dict[tuple[str, str], AnswerRecord] = {}
        self._fail_on_save = fail_on_save
        self.saved: list[AnswerRecord] = []
        for record in records or []:
            self._records[(record.field_type, record.question)] = record

    def save(self, record: AnswerRecord) -> None:
        if self._fail_on_save:
            raise OSError("disk full")
        self.saved.append(record)
        self._records[(record.field_type, record.question)] = record

    def list_all(self) -> list[AnswerRecord]:
        return list(self._records.values())

    def delete(self, field_type: str, question: str) -> bool:
        return self._records.pop((field_type, question), None) is not None


_repo_protocol_check: AnswerRepositoryPort
_repo_protocol_check = InMemoryAnswerRepository()
