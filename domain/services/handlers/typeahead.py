from __future__ import annotations

from domain.models import FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler
from domain.utils import match_option

TYPEAHEAD_SELECTOR = '[data-test-single-typeahead-input], [role="combobox"]'
LISTBOX_SELECTOR = '[role="listbox"]'
OPTION_SELECTOR = '[role="option"]'


class TypeaheadHandler(FieldHandler):
    """Autocomplete inputs: type the answer, then pick from live suggestions."""

    field_type = FieldType.TYPEAHEAD

    async def can_handle(self, group: FieldGroup) -> bool:
        return await self._find_input(group.container) is not None

    async def handle(self, group: FieldGroup) -> bool:
        element = await self._find_input(group.container)
        if element is None:
            return False
        question = group.question

        answer = await self.resolve_answer(
            question,
            lambda: self._answers.answer_textual(question),
            element=element,
            smart_first=True,
        )
        if not answer:
            return False

        delays = self._utils.delays
        await element.click()
        await element.fill("")
        await element.type_text(answer, delay_ms=delays.typing_ms)
        await self._utils.pause(delays.long_ms)

        page = self._utils.page
        if not await page.wait_for(LISTBOX_SELECTOR, state="visible", timeout_ms=delays.listbox_wait_ms):
            self._logger.debug("typeahead_no_suggestions", question=question, value=answer)
            return True

        suggestions = []
        for listbox in await page.query_all(LISTBOX_SELECTOR):
            if await listbox.is_visible():
                suggestions.extend(await listbox.query_all(OPTION_SELECTOR))
        if not suggestions:
            return True

        texts = [" ".join((await s.visible_text()).split()) for s in suggestions]
        chosen = match_option(answer, texts)
        index = texts.index(chosen) if chosen is not None else 0
        if chosen is None:
            self._logger.debug("typeahead_first_suggestion", question=question, suggestion=texts[0])
        clicked = await self._utils.safe_click(suggestions[index])
        await self._utils.pause(delays.short_ms)
        return clicked

    @staticmethod
    async def _find_input(container: ElementPort) -> ElementPort | None:
        element = await container.query(TYPEAHEAD_SELECTOR)
        if element is not None:
            return element
        for candidate in await container.query_all("input"):
            autocomplete = (await candidate.get_attribute("autocomplete") or "").lower()
            aria_autocomplete = (await candidate.get_attribute("aria-autocomplete") or "").lower()
            if autocomplete == "off" and aria_autocomplete == "list":
                return candidate
        return None
