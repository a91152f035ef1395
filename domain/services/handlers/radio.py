from __future__ import annotations

from dataclasses import dataclass

from domain.models import FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler, css_attr_value
from domain.utils import dedupe_doubled_text, match_option


@dataclass(frozen=True)
class _RadioOption:
    label: str
    radio: ElementPort
    label_element: ElementPort | None


class RadioHandler(FieldHandler):
    field_type = FieldType.RADIO

    async def can_handle(self, group: FieldGroup) -> bool:
        return await group.container.query('input[type="radio"]') is not None

    async def handle(self, group: FieldGroup) -> bool:
        question = group.question
        options = await self._options(group.container)
        if not options:
            self._logger.warning("radio_without_options", question=question)
            return False
        labels = [opt.label for opt in options]

        answer = await self.resolve_answer(
            question,
            lambda: self._answers.answer_from_options(question, labels),
            options=labels,
        )
        if not answer or not await self._select(options, answer, question):
            return False

        async def retry(previous: str, error: str) -> str | None:
            picked = await self._answers.answer_from_options_with_retry(question, labels, previous, error)
            return match_option(picked, labels) or picked

        async def refill(value: str) -> None:
            await self._select(options, value, question)

        return await self.handle_validation_error(group, question, answer, retry, refill)

    async def _options(self, container: ElementPort) -> list[_RadioOption]:
        found: list[_RadioOption] = []
        for radio in await container.query_all('input[type="radio"]'):
            label_element = None
            radio_id = await radio.get_attribute("id")
            if radio_id:
                label_element = await container.query(f'label[for="{css_attr_value(radio_id)}"]')
            if label_element is not None:
                text = dedupe_doubled_text(await label_element.visible_text())
            else:
                text = (await radio.get_attribute("aria-label")) or (await radio.get_attribute("value")) or ""
            if text.strip():
                found.append(_RadioOption(text.strip(), radio, label_element))
        return found

    async def _select(self, options: list[_RadioOption], answer: str, question: str) -> bool:
        chosen = match_option(answer, [opt.label for opt in options])
        if chosen is None:
            self._logger.warning("radio_option_not_found", question=question, answer=answer)
            return False
        option = next(opt for opt in options if opt.label == chosen)
        # Click the label: styled radios are often covered by it and reject direct clicks.
        if option.label_element is not None and await self._utils.safe_click(option.label_element):
            return True
        await option.radio.set_checked(True)
        return await option.radio.is_checked()
