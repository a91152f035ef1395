from __future__ import annotations

import re

from domain.models import FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler

EXCLUDED_INPUT_TYPES = frozenset({"button", "submit", "checkbox", "radio", "file", "hidden"})
_PLACEHOLDER_VALUE = re.compile(r"^(select|choose|enter|type|e\.g\.|ex:|mm/|dd/|yyyy)", re.IGNORECASE)


class TextHandler(FieldHandler):
    field_type = FieldType.TEXT

    async def can_handle(self, group: FieldGroup) -> bool:
        return await self._find_input(group.container) is not None

    async def handle(self, group: FieldGroup) -> bool:
        element = await self._find_input(group.container)
        if element is None:
            return False
        question = group.question

        current = (await element.input_value()).strip()
        if current and not self._ctx.config.overwrite_prefilled_text:
            if not await self._looks_like_placeholder(element, current):
                self._logger.debug("text_prefilled_kept", question=question)
                return True

        numeric = await self._is_numeric(element)

        async def generate() -> str | None:
            if numeric:
                return str(await self._answers.answer_numeric(question))
            return await self._answers.answer_textual(question)

        answer = await self.resolve_answer(question, generate, element=element)
        if not answer:
            return False
        await self._fill(element, answer)

        async def retry(previous: str, error: str) -> str | None:
            if numeric:
                return str(await self._answers.answer_numeric_with_retry(question, previous, error))
            return await self._answers.answer_textual_with_retry(question, previous, error)

        return await self.handle_validation_error(
            group,
            question,
            answer,
            retry,
            lambda value: self._fill(element, value),
        )

    async def _find_input(self, container: ElementPort) -> ElementPort | None:
        for candidate in await container.query_all("input"):
            input_type = (await candidate.get_attribute("type") or "text").lower()
            if input_type not in EXCLUDED_INPUT_TYPES:
                return candidate
        return None

    async def _fill(self, element: ElementPort, value: str) -> None:
        await element.click()
        await element.fill("")
        await element.fill(value)
        await self._utils.pause(self._utils.delays.short_ms)

    @staticmethod
    async def _is_numeric(element: ElementPort) -> bool:
        input_type = (await element.get_attribute("type") or "").lower()
        if input_type == "number":
            return True
        inputmode = (await element.get_attribute("inputmode") or "").lower()
        if inputmode in ("numeric", "decimal"):
            return True
        ident = " ".join(
            [(await element.get_attribute("id") or ""), (await element.get_attribute("name") or "")]
        ).lower()
        if "phone" in ident:
            return False
        return "numeric" in ident or "number" in ident

    @staticmethod
    async def _looks_like_placeholder(element: ElementPort, value: str) -> bool:
        placeholder = (await element.get_attribute("placeholder") or "").strip()
        if placeholder and placeholder.lower() == value.lower():
            return True
        return bool(_PLACEHOLDER_VALUE.match(value))
