from __future__ import annotations

import json
import re
from dataclasses import dataclass

from domain.models import FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler, css_attr_value
from domain.utils import dedupe_doubled_text, normalize_text, parse_number_list

CONSENT_KEYWORDS = (
    # English
    "agree", "accept", "consent", "acknowledge", "confirm", "terms", "privacy",
    "policy", "understand", "certify",
    # French
    "accepte", "j'accepte", "conditions", "politique de confidentialite", "consentement",
    "certifie", "reconnais", "atteste",
    # German
    "zustimmen", "stimme", "akzeptiere", "einverstanden", "datenschutz", "bedingungen",
    "bestatige", "einwillige",
    # Spanish
    "acepto", "aceptar", "terminos", "condiciones", "privacidad", "consentimiento",
    "confirmo", "certifico",
)
_AFFIRMATIVE = ("yes", "oui", "ja", "si", "true", "y")


def is_consent_text(text: str) -> bool:
    normalized = normalize_text(text)
    return any(re.search(r"(?<!\w)" + re.escape(keyword), normalized) for keyword in CONSENT_KEYWORDS)


def is_affirmative(answer: str) -> bool:
    words = normalize_text(answer).split()
    return bool(words) and words[0].strip(".,!") in _AFFIRMATIVE


def encode_selection(labels: list[str]) -> str:
    return json.dumps(labels, ensure_ascii=False)


def decode_selection(value: str) -> list[str] | None:
    """Labels stored by ``encode_selection``; None for anything else."""
    try:
        labels = json.loads(value)
    except ValueError:
        return None
    if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
        return None
    return labels


@dataclass(frozen=True)
class _Checkbox:
    label: str
    box: ElementPort
    label_element: ElementPort | None


class CheckboxHandler(FieldHandler):
    """
    Single checkboxes are consent boxes or yes/no questions; groups of
    checkboxes are multi-select questions.

    In retry mode, set after the page failed validation, every unchecked
    box is checked so the wizard can move on.
    """

    field_type = FieldType.CHECKBOX
    retry_mode: bool = False

    def set_retry_mode(self, enabled: bool) -> None:
        self.retry_mode = enabled

    async def can_handle(self, group: FieldGroup) -> bool:
        return await group.container.query('input[type="checkbox"]') is not None

    async def handle(self, group: FieldGroup) -> bool:
        boxes = await self._checkboxes(group.container, group.question)
        if not boxes:
            return False

        if self.retry_mode:
            for item in boxes:
                if not await item.box.is_checked():
                    await self._check(item)
            self._logger.info("checkbox_retry_mode_checked_all", question=group.question, count=len(boxes))
            return True

        if len(boxes) == 1:
            return await self._handle_single(group, boxes[0])
        return await self._handle_multiple(group, boxes)

    async def _handle_single(self, group: FieldGroup, item: _Checkbox) -> bool:
        if await item.box.is_checked():
            return True
        if is_consent_text(item.label) or is_consent_text(group.question):
            self._logger.debug("checkbox_consent_auto_checked", label=item.label)
            return await self._check(item)

        answer = self._cache.get(self.name, item.label)
        if answer is None:
            prompt = f'Should I check this checkbox? "{item.label}" (Answer: yes or no)'
            answer = (await self._answers.answer_checkbox_question(prompt)).strip()
            if not answer:
                self._logger.warning("answer_unresolved", field_type=self.name, question=item.label)
                return False
            answer = "yes" if is_affirmative(answer) else "no"
            self._cache.remember(self.name, item.label, answer)

        if is_affirmative(answer):
            return await self._check(item)
        return True

    async def _handle_multiple(self, group: FieldGroup, boxes: list[_Checkbox]) -> bool:
        question = group.question
        labels = [item.label for item in boxes]

        cached = self._cache.get(self.name, question)
        remembered = decode_selection(cached) if cached is not None else None
        if remembered is not None:
            wanted = {normalize_text(label) for label in remembered}
            selected = [i for i, label in enumerate(labels, start=1) if normalize_text(label) in wanted]
        else:
            numbered = "\n".join(f"{i}. {label}" for i, label in enumerate(labels, start=1))
            prompt = (
                f"{question}\n\nOptions:\n{numbered}\n\n"
                'Which options should be checked? List the numbers separated by commas, or say "none".'
            )
            raw = await self._answers.answer_checkbox_question(prompt)
            selected = parse_number_list(raw, len(labels))
            self._cache.remember(
                self.name,
                question,
                encode_selection([labels[i - 1] for i in selected]),
            )

        for index in selected:
            item = boxes[index - 1]
            if not await item.box.is_checked():
                await self._check(item)
        self._logger.debug("checkbox_multi_selected", question=question, selected=selected)
        return True

    async def _checkboxes(self, container: ElementPort, question: str) -> list[_Checkbox]:
        found: list[_Checkbox] = []
        for box in await container.query_all('input[type="checkbox"]'):
            label_element = None
            box_id = await box.get_attribute("id")
            if box_id:
                label_element = await container.query(f'label[for="{css_attr_value(box_id)}"]')
            if label_element is not None:
                text = dedupe_doubled_text(await label_element.visible_text())
            else:
                text = await self._fallback_label(box) or question
            found.append(_Checkbox(text, box, label_element))
        return found

    @staticmethod
    async def _fallback_label(box: ElementPort) -> str:
        parent = await box.parent()
        if parent is None:
            return ""
        return dedupe_doubled_text(await parent.visible_text())

    async def _check(self, item: _Checkbox) -> bool:
        if item.label_element is not None:
            await self._utils.safe_click(item.label_element)
            if await item.box.is_checked():
                return True
        await item.box.set_checked(True)
        checked = await item.box.is_checked()
        if not checked:
            self._logger.warning("checkbox_check_failed", label=item.label)
        return checked
