from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from domain.models import FieldGroup, FieldType, WizardConfig
from domain.ports import AnswerGeneratorPort, ElementPort, LoggerPort
from domain.services.answer_cache import AnswerCache
from domain.services.form_utils import FormUtils
from domain.services.smart_matcher import SmartFieldMatcher
from domain.utils import dedupe_doubled_text, match_option

UNKNOWN_QUESTION = "unknown_question"

TITLE_MARKERS = (
    "[data-test-form-builder-radio-button-form-component__title]",
    "[data-test-checkbox-form-title]",
    "[data-test-text-entity-list-form-title]",
    "[data-test-single-typeahead-entity-form-title]",
    ".fb-dash-form-element__label",
)

RetryFn = Callable[[str, str], Awaitable[str | None]]
FillFn = Callable[[str], Awaitable[None]]


@dataclass(frozen=True)
class HandlerContext:
    """Session-scoped collaborators shared by every handler."""

    utils: FormUtils
    cache: AnswerCache
    answers: AnswerGeneratorPort
    matcher: SmartFieldMatcher
    logger: LoggerPort

    @property
    def config(self) -> WizardConfig:
        return self.utils.config


async def extract_question_text(container: ElementPort) -> str:
    """Best human-readable question for a field group."""
    for selector in ("legend", "label", *TITLE_MARKERS):
        node = await container.query(selector)
        if node is None:
            continue
        text = dedupe_doubled_text(await node.visible_text())
        if text:
            return text

    aria = await container.get_attribute("aria-label")
    control = await container.query("input, select, textarea")
    if not aria and control is not None:
        aria = await control.get_attribute("aria-label")
    if aria and aria.strip():
        return dedupe_doubled_text(aria)

    if control is not None:
        name = await control.get_attribute("name")
        if name and name.strip():
            return name.strip()
    return UNKNOWN_QUESTION


def css_attr_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class FieldHandler(ABC):
    """
    Strategy for one kind of field group.

    ``can_handle`` is a cheap structural test without side effects;
    ``handle`` fills the group and reports success.
    """

    field_type: FieldType

    def __init__(self, ctx: HandlerContext) -> None:
        self._ctx = ctx
        self._utils = ctx.utils
        self._cache = ctx.cache
        self._answers = ctx.answers
        self._matcher = ctx.matcher
        self._logger = ctx.logger

    @property
    def name(self) -> str:
        return self.field_type.value

    @abstractmethod
    async def can_handle(self, group: FieldGroup) -> bool:
        ...

    @abstractmethod
    async def handle(self, group: FieldGroup) -> bool:
        ...

    async def extract_question_text(self, container: ElementPort) -> str:
        return await extract_question_text(container)

    # -- answer resolution --------------------------------------------------

    async def resolve_answer(
        self,
        question: str,
        generate: Callable[[], Awaitable[str | None]],
        *,
        element: ElementPort | None = None,
        options: Sequence[str] | None = None,
        specialized: Callable[[Sequence[str]], str | None] | None = None,
        use_smart: bool = True,
        smart_first: bool = False,
    ) -> str | None:
        """Cache, then profile heuristics, then the generation capability.

        For closed-option fields every candidate must correspond to a live
        option, otherwise the next source is tried.
        """
        sources: list[tuple[str, Callable[[], Awaitable[str | None]]]] = [
            ("cache", lambda: self._from_cache(question, options)),
        ]
        if use_smart:
            smart = ("smart", lambda: self._from_smart(question, element, options, specialized))
            if smart_first:
                sources.insert(0, smart)
            else:
                sources.append(smart)

        for source, lookup in sources:
            value = await lookup()
            if value:
                self._logger.debug("answer_resolved", field_type=self.name, source=source, question=question)
                if source != "cache":
                    self._cache.remember(self.name, question, value)
                return value

        generated = (await generate() or "").strip()
        if not generated:
            self._logger.warning("answer_unresolved", field_type=self.name, question=question)
            return None
        if options is not None:
            matched = match_option(generated, options)
            if matched is None:
                self._logger.warning(
                    "generated_answer_not_in_options",
                    field_type=self.name,
                    question=question,
                    answer=generated,
                )
                return generated
            generated = matched
        self._logger.debug("answer_resolved", field_type=self.name, source="generated", question=question)
        self._cache.remember(self.name, question, generated)
        return generated

    async def _from_cache(self, question: str, options: Sequence[str] | None) -> str | None:
        cached = self._cache.get(self.name, question)
        if cached is None or options is None:
            return cached
        return match_option(cached, options)

    async def _from_smart(
        self,
        question: str,
        element: ElementPort | None,
        options: Sequence[str] | None,
        specialized: Callable[[Sequence[str]], str | None] | None,
    ) -> str | None:
        candidates: list[str | None] = []
        if specialized is not None and options is not None:
            candidates.append(specialized(options))
        if element is not None:
            candidates.append(await self._matcher.match_by_element_id(element))
        candidates.append(self._matcher.match_by_question_text(question))
        for candidate in candidates:
            if not candidate:
                continue
            if options is None:
                return candidate
            matched = match_option(candidate, options)
            if matched is not None:
                return matched
        return None

    # -- validation retry ---------------------------------------------------

    async def handle_validation_error(
        self,
        group: FieldGroup,
        question: str,
        answer: str,
        retry_fn: RetryFn,
        fill_fn: FillFn,
    ) -> bool:
        """Retry with the site's error text a bounded number of times.

        Returns ``False`` when an error is still shown afterwards.
        """
        delays = self._utils.delays
        for attempt in range(1, self._ctx.config.max_validation_retries + 1):
            await self._utils.pause(delays.medium_ms)
            error = await self._utils.extract_field_errors(group.container)
            if not error:
                return True
            self._logger.info(
                "validation_retry",
                field_type=self.name,
                question=question,
                attempt=attempt,
                error=error,
            )
            alternative = (await retry_fn(answer, error) or "").strip()
            if not alternative:
                break
            await fill_fn(alternative)
            self._cache.remember(self.name, question, alternative)
            answer = alternative

        await self._utils.pause(delays.medium_ms)
        error = await self._utils.extract_field_errors(group.container)
        if error:
            self._logger.warning(
                "validation_retry_failed",
                field_type=self.name,
                question=question,
                error=error,
            )
            return False
        return True
