"""Answer generation on top of a plain text-completion client."""

from __future__ import annotations

import re
from typing import Sequence

from domain.models import CandidateProfile
from domain.ports import LLMClientPort, LoggerPort
from domain.prompts import (
    build_checkbox_prompt,
    build_numeric_prompt,
    build_options_prompt,
    build_retry_prompt,
    build_textual_prompt,
)
from domain.utils import match_option

_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")


def extract_number(text: str, default: int) -> int:
    match = _NUMBER.search(text.replace(" ", "").replace("\u00a0", ""))
    if not match:
        return default
    return int(round(float(match.group(0).replace(",", "."))))


def clean_answer(text: str) -> str:
    cleaned = text.strip()
    if cleaned.lower().startswith("answer:"):
        cleaned = cleaned[len("answer:"):].strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in "\"'":
        cleaned = cleaned[1:-1].strip()
    return cleaned


class LLMAnswerGenerator:
    """
    Implements ``AnswerGeneratorPort`` by prompting an ``LLMClientPort``.

    Option answers are mapped back to the closest offered option so callers
    always receive an exact option label when one fits.
    """

    def __init__(
        self,
        *,
        llm: LLMClientPort,
        profile: CandidateProfile,
        logger: LoggerPort,
        job_context: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 800,
    ) -> None:
        self._llm = llm
        self._profile = profile
        self._logger = logger
        self._job_context = job_context
        self._temperature = temperature
        self._max_tokens = max_tokens
        self.call_count = 0

    async def answer_textual(self, question: str) -> str:
        return await self._ask(build_textual_prompt(self._profile, question, job_context=self._job_context))

    async def answer_numeric(self, question: str, default: int = 3) -> int:
        raw = await self._ask(build_numeric_prompt(self._profile, question, job_context=self._job_context))
        return extract_number(raw, default)

    async def answer_from_options(self, question: str, options: Sequence[str]) -> str:
        raw = await self._ask(
            build_options_prompt(self._profile, question, options, job_context=self._job_context),
        )
        return self._pick(raw, options)

    async def answer_checkbox_question(self, prompt: str) -> str:
        return await self._ask(build_checkbox_prompt(self._profile, prompt, job_context=self._job_context))

    async def answer_textual_with_retry(
        self,
        question: str,
        previous_answer: str,
        error_message: str,
    ) -> str:
        return await self._ask(
            build_retry_prompt(
                self._profile,
                question,
                previous_answer,
                error_message,
                job_context=self._job_context,
            ),
        )

    async def answer_numeric_with_retry(
        self,
        question: str,
        previous_answer: str,
        error_message: str,
        default: int = 3,
    ) -> int:
        raw = await self._ask(
            build_retry_prompt(
                self._profile,
                question,
                previous_answer,
                error_message,
                numeric=True,
                job_context=self._job_context,
            ),
        )
        return extract_number(raw, default)

    async def answer_from_options_with_retry(
        self,
        question: str,
        options: Sequence[str],
        previous_answer: str,
        error_message: str,
    ) -> str:
        raw = await self._ask(
            build_retry_prompt(
                self._profile,
                question,
                previous_answer,
                error_message,
                options=options,
                job_context=self._job_context,
            ),
        )
        return self._pick(raw, options)

    # -- internal helpers ---------------------------------------------------

    async def _ask(self, prompt: str) -> str:
        self.call_count += 1
        try:
            raw = await self._llm.complete(
                prompt,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as exc:
            self._logger.error("answer_generation_failed", error=str(exc))
            return ""
        return clean_answer(raw)

    def _pick(self, raw: str, options: Sequence[str]) -> str:
        if not raw:
            return ""
        picked = match_option(raw, options)
        if picked is None:
            self._logger.warning("generated_option_unmatched", answer=raw, options=len(options))
            return raw
        return picked
