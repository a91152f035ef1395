from __future__ import annotations

import re

from domain.models import DateParts, FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.handlers.base import FieldHandler
from domain.services.handlers.dropdown import SelectOption, read_select_options
from domain.utils import normalize_text

DATE_PROMPT_SUFFIX = (
    ' (Please provide a date. Common formats: YYYY-MM-DD, MM/DD/YYYY, or just month/year like "January 2024")'
)

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
_MONTH_PATTERN = re.compile(
    r"\b(" + "|".join(MONTH_NAMES) + r"|jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec)\b",
    re.IGNORECASE,
)
_ISO_PATTERN = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")
_US_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_MONTH_YEAR_NUMERIC = re.compile(r"\b(\d{1,2})/(\d{4})\b")
_YEAR_PATTERN = re.compile(r"\b((?:19|20)\d{2})\b")
_DATE_LABEL = re.compile(r"(?<![\w-])(date|dates|start|end|datum|fecha)(?![\w-])")

MONTH_SELECT = 'select[id*="month"], select[name*="month"]'
YEAR_SELECT = 'select[id*="year"], select[name*="year"]'


def parse_date_answer(text: str) -> DateParts | None:
    """Parse ISO, US or "Month Year" answers, in that order."""
    iso = _ISO_PATTERN.search(text)
    if iso:
        return _checked(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
    us = _US_PATTERN.search(text)
    if us:
        return _checked(int(us.group(3)), int(us.group(1)), int(us.group(2)))
    numeric = _MONTH_YEAR_NUMERIC.search(text)
    if numeric:
        return _checked(int(numeric.group(2)), int(numeric.group(1)), None)
    month = _MONTH_PATTERN.search(text)
    year = _YEAR_PATTERN.search(text)
    if year:
        month_number = None
        if month:
            prefix = month.group(1).lower()[:3]
            month_number = next(i for i, name in enumerate(MONTH_NAMES, start=1) if name.startswith(prefix))
        return DateParts(year=int(year.group(1)), month=month_number)
    return None


def _checked(year: int, month: int | None, day: int | None) -> DateParts | None:
    if month is not None and not 1 <= month <= 12:
        return None
    if day is not None and not 1 <= day <= 31:
        return None
    return DateParts(year=year, month=month, day=day)


def iso_date(parts: DateParts) -> str:
    return f"{parts.year:04d}-{parts.month or 1:02d}-{parts.day or 1:02d}"


class DateHandler(FieldHandler):
    field_type = FieldType.DATE

    async def can_handle(self, group: FieldGroup) -> bool:
        container = group.container
        if await container.query('input[type="date"]') is not None:
            return True
        if await container.query(MONTH_SELECT) is not None or await container.query(YEAR_SELECT) is not None:
            return True
        label = await container.query("label")
        if label is None:
            return False
        if not _DATE_LABEL.search(normalize_text(await label.visible_text())):
            return False
        return await container.query("input") is not None

    async def handle(self, group: FieldGroup) -> bool:
        container = group.container
        question = group.question

        answer = self._cache.get(self.name, question)
        if answer is None:
            answer = (await self._answers.answer_textual(question + DATE_PROMPT_SUFFIX)).strip()
            if not answer:
                self._logger.warning("answer_unresolved", field_type=self.name, question=question)
                return False
            self._cache.remember(self.name, question, answer)
        parts = parse_date_answer(answer)

        date_input = await container.query('input[type="date"]')
        if date_input is not None:
            if parts is None:
                self._logger.warning("date_unparseable", question=question, answer=answer)
                return False
            await date_input.fill("")
            await date_input.fill(iso_date(parts))
            return True

        month_select = await container.query(MONTH_SELECT)
        year_select = await container.query(YEAR_SELECT)
        if month_select is not None or year_select is not None:
            if parts is None:
                self._logger.warning("date_unparseable", question=question, answer=answer)
                return False
            ok = True
            if month_select is not None and parts.month is not None:
                ok = await self._select_month(month_select, parts.month) and ok
            if year_select is not None:
                ok = await self._select_by(year_select, [str(parts.year)]) and ok
            return ok

        text_input = await container.query("input")
        if text_input is None:
            return False
        await text_input.fill("")
        await text_input.fill(await self._text_representation(text_input, answer, parts))
        await self._utils.pause(self._utils.delays.short_ms)
        return True

    async def _select_month(self, select: ElementPort, month: int) -> bool:
        name = MONTH_NAMES[month - 1]
        return await self._select_by(select, [f"{month:02d}", str(month), name, name[:3]])

    async def _select_by(self, select: ElementPort, candidates: list[str]) -> bool:
        options: list[SelectOption] = await read_select_options(select)
        for candidate in candidates:
            wanted = normalize_text(candidate)
            for option in options:
                if normalize_text(option.value) == wanted or normalize_text(option.label) == wanted:
                    await select.select_option(option.value)
                    return True
        self._logger.warning("date_option_not_found", candidates=candidates)
        return False

    @staticmethod
    async def _text_representation(element: ElementPort, answer: str, parts: DateParts | None) -> str:
        if parts is None:
            return answer
        placeholder = (await element.get_attribute("placeholder") or "").lower()
        if "mm/dd/yyyy" in placeholder and parts.month and parts.day:
            return f"{parts.month:02d}/{parts.day:02d}/{parts.year}"
        if "dd/mm/yyyy" in placeholder and parts.month and parts.day:
            return f"{parts.day:02d}/{parts.month:02d}/{parts.year}"
        if "yyyy-mm-dd" in placeholder:
            return iso_date(parts)
        return answer
