from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence

from domain.models import FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler
from domain.utils import match_option, normalize_text

SCHOOL_KEYWORDS = ("school", "university", "college", "institution", "universite", "ecole", "hochschule", "universidad")
PHONE_PREFIX_KEYWORDS = ("country code", "phone prefix", "dialing code", "indicatif", "vorwahl", "prefijo", "code pays")
_PLACEHOLDER_WORDS = ("select", "choose", "choisir", "selectionner", "auswahlen", "seleccionar", "elige")


@dataclass(frozen=True)
class SelectOption:
    label: str
    value: str


def is_placeholder_option(option: SelectOption) -> bool:
    if not option.value.strip():
        return True
    text = normalize_text(option.label)
    return not text or any(word in text for word in _PLACEHOLDER_WORDS)


async def read_select_options(select: ElementPort) -> list[SelectOption]:
    options: list[SelectOption] = []
    for node in await select.query_all("option"):
        label = " ".join((await node.text_content()).split())
        value = await node.get_attribute("value")
        options.append(SelectOption(label=label, value=label if value is None else value))
    if options and is_placeholder_option(options[0]):
        options = options[1:]
    return options


class DropdownHandler(FieldHandler):
    field_type = FieldType.DROPDOWN

    async def can_handle(self, group: FieldGroup) -> bool:
        return await group.container.query("select") is not None

    async def handle(self, group: FieldGroup) -> bool:
        select = await group.container.query("select")
        if select is None:
            return False
        question = group.question
        options = await read_select_options(select)
        if not options:
            self._logger.warning("dropdown_without_options", question=question)
            return False
        labels = [opt.label for opt in options]
        offered = labels[: self._ctx.config.max_options_for_generation]
        if len(offered) < len(labels):
            self._logger.debug("dropdown_options_truncated", question=question, total=len(labels))

        answer = await self.resolve_answer(
            question,
            lambda: self._answers.answer_from_options(question, offered),
            element=select,
            options=labels,
            specialized=self._specialization(question),
        )
        if not answer or not await self._select(select, options, answer, question):
            return False

        async def retry(previous: str, error: str) -> str | None:
            picked = await self._answers.answer_from_options_with_retry(question, offered, previous, error)
            return match_option(picked, labels) or picked

        async def refill(value: str) -> None:
            await self._select(select, options, value, question)

        return await self.handle_validation_error(group, question, answer, retry, refill)

    def _specialization(self, question: str) -> Callable[[Sequence[str]], str | None] | None:
        q = normalize_text(question)
        if any(re.search(r"(?<!\w)" + k, q) for k in SCHOOL_KEYWORDS):
            return self._matcher.match_school
        if any(k in q for k in PHONE_PREFIX_KEYWORDS):
            return self._matcher.match_phone_prefix
        return None

    async def _select(
        self,
        select: ElementPort,
        options: list[SelectOption],
        answer: str,
        question: str,
    ) -> bool:
        chosen = match_option(answer, [opt.label for opt in options])
        if chosen is None:
            self._logger.warning("dropdown_option_not_found", question=question, answer=answer)
            return False
        option = next(opt for opt in options if opt.label == chosen)
        await select.select_option(option.value)
        await self._utils.pause(self._utils.delays.short_ms)
        return True
