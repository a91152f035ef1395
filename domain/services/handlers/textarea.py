from __future__ import annotations

from domain.models import FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler


class TextareaHandler(FieldHandler):
    field_type = FieldType.TEXTAREA

    async def can_handle(self, group: FieldGroup) -> bool:
        return await group.container.query("textarea") is not None

    async def handle(self, group: FieldGroup) -> bool:
        element = await group.container.query("textarea")
        if element is None:
            return False
        question = group.question

        existing = (await element.input_value()).strip()
        if len(existing) > self._ctx.config.textarea_filled_threshold:
            self._logger.debug("textarea_already_filled", question=question, length=len(existing))
            return True

        answer = await self.resolve_answer(
            question,
            lambda: self._answers.answer_textual(question),
            use_smart=False,
        )
        if not answer:
            return False
        await self._fill(element, answer)

        return await self.handle_validation_error(
            group,
            question,
            answer,
            lambda previous, error: self._answers.answer_textual_with_retry(question, previous, error),
            lambda value: self._fill(element, value),
        )

    async def _fill(self, element: ElementPort, value: str) -> None:
        await element.click()
        await element.fill(value)
        await self._utils.pause(self._utils.delays.short_ms)
