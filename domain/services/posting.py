from __future__ import annotations

import re

from domain.models import JobPosting, WizardSelectors
from domain.ports import ElementPort, LoggerPort, WizardPagePort
from domain.utils import dedupe_doubled_text, normalize_text

_APPLIED_STATUS = re.compile(
    r"(?<!\w)(?:applied|application sent|candidature envoyee|candidatura enviada|bewerbung gesendet)(?!\w)"
)


class JobPostingInspector:
    """Reads the job page that hosts the wizard entry button."""

    def __init__(
        self,
        *,
        page: WizardPagePort,
        logger: LoggerPort,
        selectors: WizardSelectors | None = None,
    ) -> None:
        self._page = page
        self._logger = logger
        self._selectors = selectors or WizardSelectors()

    async def inspect(self) -> JobPosting:
        posting = JobPosting(
            title=await self._first_text(self._selectors.job_title),
            company=await self._first_text(self._selectors.job_company),
            description=await self.job_description(),
            already_applied=await self.is_already_applied(),
        )
        self._logger.info(
            "job_posting_inspected",
            title=posting.title,
            company=posting.company,
            description_chars=len(posting.description or ""),
            already_applied=posting.already_applied,
        )
        return posting

    async def is_already_applied(self) -> bool:
        for badge in await self._page.query_all(self._selectors.applied_badge):
            if await badge.is_visible():
                return True
        for node in await self._page.query_all(self._selectors.applied_status):
            if not await node.is_visible():
                continue
            if _APPLIED_STATUS.search(normalize_text(await node.visible_text())):
                return True
        return False

    async def job_description(self) -> str | None:
        """Expand a collapsed description, then return the first non-empty one."""
        expand = await self._first_visible(self._selectors.description_expand)
        if expand is not None:
            try:
                await expand.click()
            except Exception as exc:
                self._logger.debug("job_description_expand_failed", error=str(exc))
        for selector in self._selectors.job_description:
            node = await self._page.query(selector)
            if node is None:
                continue
            text = " ".join((await node.text_content()).split())
            if text:
                return text
        return None

    async def _first_text(self, selector: str) -> str | None:
        node = await self._first_visible(selector)
        if node is None:
            return None
        return dedupe_doubled_text(await node.visible_text()) or None

    async def _first_visible(self, selector: str) -> ElementPort | None:
        for node in await self._page.query_all(selector):
            if await node.is_visible():
                return node
        return None
