from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Protocol, Sequence, runtime_checkable

from domain.models import (
    AnswerRecord,
    AppConfig,
    CandidateProfile,
    RunContext,
    StatusUpdate,
)


@runtime_checkable
class ElementPort(Protocol):
    """
    Handle to one DOM element of the wizard.

    Query methods search the element's descendants with CSS selectors.
    Waits return ``False`` on timeout instead of raising.
    """

    async def query_all(self, selector: str) -> Sequence["ElementPort"]:
        ...

    async def query(self, selector: str) -> "ElementPort | None":
        ...

    async def parent(self) -> "ElementPort | None":
        ...

    async def get_attribute(self, name: str) -> str | None:
        ...

    async def tag_name(self) -> str:
        ...

    async def text_content(self) -> str:
        ...

    async def visible_text(self) -> str:
        """Text content without screen-reader-only copies."""
        ...

    async def input_value(self) -> str:
        ...

    async def is_visible(self) -> bool:
        ...

    async def is_enabled(self) -> bool:
        ...

    async def is_checked(self) -> bool:
        ...

    async def click(self) -> None:
        ...

    async def fill(self, value: str) -> None:
        ...

    async def type_text(self, value: str, *, delay_ms: int = 0) -> None:
        ...

    async def set_checked(self, checked: bool) -> None:
        ...

    async def select_option(self, value: str) -> None:
        ...

    async def set_input_files(self, path: str) -> None:
        ...

    async def scroll_into_view(self) -> None:
        ...

    async def scroll_by(self, pixels: int) -> None:
        ...

    async def wait_until_visible(self, timeout_ms: int) -> bool:
        ...


@runtime_checkable
class WizardPagePort(Protocol):
    """Page-level primitives the wizard core needs."""

    async def query_all(self, selector: str) -> Sequence[ElementPort]:
        ...

    async def query(self, selector: str) -> ElementPort | None:
        ...

    async def wait(self, ms: int) -> None:
        ...

    async def wait_for(
        self,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: int = 5000,
    ) -> bool:
        ...

    async def press_key(self, key: str) -> None:
        ...

    async def content(self) -> str:
        ...

    async def render_pdf(self, html: str, path: str) -> None:
        ...

    async def upload_via_file_chooser(self, trigger: ElementPort, path: str) -> bool:
        ...


@runtime_checkable
class AnswerGeneratorPort(Protocol):
    """External capability that produces answers to form questions."""

    async def answer_textual(self, question: str) -> str:
        ...

    async def answer_numeric(self, question: str, default: int = 3) -> int:
        ...

    async def answer_from_options(self, question: str, options: Sequence[str]) -> str:
        ...

    async def answer_checkbox_question(self, prompt: str) -> str:
        ...

    async def answer_textual_with_retry(
        self,
        question: str,
        previous_answer: str,
        error_message: str,
    ) -> str:
        ...

    async def answer_numeric_with_retry(
        self,
        question: str,
        previous_answer: str,
        error_message: str,
        default: int = 3,
    ) -> int:
        ...

    async def answer_from_options_with_retry(
        self,
        question: str,
        options: Sequence[str],
        previous_answer: str,
        error_message: str,
    ) -> str:
        ...


@runtime_checkable
class AnswerRepositoryPort(Protocol):
    """Persists remembered answers across sessions."""

    @abstractmethod
    def save(self, record: AnswerRecord) -> None:
        ...

    @abstractmethod
    def list_all(self) -> Sequence[AnswerRecord]:
        ...

    @abstractmethod
    def delete(self, field_type: str, question: str) -> bool:
        ...


@runtime_checkable
class ConfigProviderPort(Protocol):
    """Source of application config, candidate profile and documents."""

    def get_config(self) -> AppConfig:
        ...

    def get_profile(self) -> CandidateProfile:
        ...

    def get_resume_path(self) -> str:
        ...

    def get_cover_letter_path(self) -> str | None:
        ...

    def validate(self) -> list[str]:
        ...


@runtime_checkable
class DebugArtifactStorePort(Protocol):
    """Storage for per-run debug snapshots and metadata."""

    def ensure_run_directory(self, run_context: RunContext) -> str:
        ...

    def save_snapshot(
        self,
        run_context: RunContext,
        step_name: str,
        html: str,
    ) -> str:
        ...

    def save_run_metadata(
        self,
        run_context: RunContext,
        metadata: dict[str, object],
    ) -> str:
        ...


@runtime_checkable
class StatusObserverPort(Protocol):
    """Receives status updates published by a wizard session."""

    def publish(self, update: StatusUpdate) -> None:
        ...


@runtime_checkable
class LLMClientPort(Protocol):
    """Thin abstraction over an LLM text completion API."""

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Time source for deterministic and easily testable code."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class IdGeneratorPort(Protocol):
    """Identifiers for wizard runs; they name debug snapshot directories."""

    def new_run_id(self) -> str:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def debug(self, message: str, **fields: Any) -> None:
        ...

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "ElementPort",
    "WizardPagePort",
    "AnswerGeneratorPort",
    "AnswerRepositoryPort",
    "ConfigProviderPort",
    "DebugArtifactStorePort",
    "StatusObserverPort",
    "LLMClientPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
