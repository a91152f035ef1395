from __future__ import annotations

from typing import Sequence

from domain.models import DelayPolicy, WizardConfig, WizardSelectors
from domain.ports import ElementPort, LoggerPort, WizardPagePort
from domain.utils import dedupe_doubled_text


class FormUtils:
    """DOM helpers shared by every field handler and the navigator."""

    def __init__(
        self,
        *,
        page: WizardPagePort,
        logger: LoggerPort,
        config: WizardConfig | None = None,
        selectors: WizardSelectors | None = None,
    ) -> None:
        self.page = page
        self.config = config or WizardConfig()
        self.selectors = selectors or WizardSelectors()
        self._logger = logger

    @property
    def delays(self) -> DelayPolicy:
        return self.config.delays

    async def pause(self, ms: int) -> None:
        if ms > 0:
            await self.page.wait(ms)

    async def safe_click(self, element: ElementPort) -> bool:
        """Scroll, wait for visibility and click, retrying a few times."""
        attempts = max(1, self.config.safe_click_retries)
        for attempt in range(1, attempts + 1):
            try:
                await element.scroll_into_view()
                if not await element.wait_until_visible(self.delays.element_wait_ms):
                    raise TimeoutError("element not visible")
                await element.click()
                return True
            except Exception as exc:
                self._logger.debug("safe_click_retry", attempt=attempt, error=str(exc))
                if attempt < attempts:
                    await self.pause(self.delays.medium_ms)
        self._logger.warning("safe_click_failed", attempts=attempts)
        return False

    async def extract_field_errors(self, container: ElementPort) -> str | None:
        for selector in self.selectors.field_errors:
            for node in await container.query_all(selector):
                text = (await node.visible_text()).strip()
                if text:
                    return dedupe_doubled_text(text)
        return None

    async def stable_key(self, container: ElementPort) -> str:
        """Identify a group across scans: id, else name, else leading text."""
        for attr in ("id", "name"):
            value = await container.get_attribute(attr)
            if value:
                return f"{attr}:{value}"
        control = await container.query("input, select, textarea")
        if control is not None:
            for attr in ("id", "name"):
                value = await control.get_attribute(attr)
                if value:
                    return f"control-{attr}:{value}"
        text = " ".join((await container.text_content()).split())
        return f"text:{text[:100]}"

    async def first_visible(self, elements: Sequence[ElementPort]) -> ElementPort | None:
        for element in elements:
            if await element.is_visible():
                return element
        return None
