from __future__ import annotations

from typing import Any

from domain.errors import WizardError
from domain.models import WizardSelectors

from .playwright_page import PlaywrightWizardPage

ENTRY_BUTTON_SELECTORS = (
    "button.jobs-apply-button",
    "button[data-live-test-job-apply-button]",
    'button[aria-label*="Easy Apply"]',
    'button[aria-label*="Candidature simplifiée"]',
)


class PlaywrightBrowserSession:
    """
    Owns the Chromium process used for one wizard run.

    Requires ``playwright`` to be installed and browsers set up via
    ``playwright install chromium``. Pass ``storage_state`` to reuse a
    logged-in browser state exported from an earlier session.

    Call ``close()`` when finished.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        storage_state: str | None = None,
        selectors: WizardSelectors | None = None,
        navigation_timeout_ms: int = 30_000,
    ) -> None:
        self._headless = headless
        self._storage_state = storage_state
        self._selectors = selectors or WizardSelectors()
        self._navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None

    async def launch(self) -> None:
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._headless)
        self._context = await self._browser.new_context(storage_state=self._storage_state)
        self._page = await self._context.new_page()

    async def close(self) -> None:
        if self._page:
            await self._page.close()
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()

    def _ensure_page(self) -> Any:
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page

    # -- navigation ---------------------------------------------------------

    async def goto(self, url: str) -> None:
        page = self._ensure_page()
        await page.goto(url, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms)

    async def open_posting(self, url: str) -> PlaywrightWizardPage:
        """Open the job page without touching the wizard."""
        page = self._ensure_page()
        await self.goto(url)
        return PlaywrightWizardPage(page)

    async def enter_wizard(self, wizard: PlaywrightWizardPage) -> PlaywrightWizardPage:
        """Click the entry button unless the wizard is already open, then wait for it."""
        if await wizard.query(self._selectors.modal) is None:
            entry = None
            for selector in ENTRY_BUTTON_SELECTORS:
                entry = await wizard.query(selector)
                if entry is not None and await entry.is_visible():
                    break
                entry = None
            if entry is None:
                raise WizardError("No application entry button found on the job page")
            await entry.click()

        if not await wizard.wait_for(self._selectors.modal, timeout_ms=self._navigation_timeout_ms):
            raise WizardError("Application wizard did not open")
        return wizard
