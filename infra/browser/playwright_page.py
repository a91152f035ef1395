"""Playwright-backed implementations of ElementPort and WizardPagePort.

Every element handle wraps a Playwright ``Locator`` pinned to a single
match with ``nth(i)`` so it behaves like a stable DOM reference for the
lifetime of the current wizard page.
"""

from __future__ import annotations

from typing import Any, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

_VISIBLE_TEXT_JS = """
(el) => {
  const clone = el.cloneNode(true);
  clone.querySelectorAll('.visually-hidden, .sr-only')
    .forEach((node) => node.remove());
  return clone.textContent || '';
}
"""


class PlaywrightElement:
    """ElementPort over a single-match Playwright locator."""

    def __init__(self, locator: Any) -> None:
        self._locator = locator

    @property
    def locator(self) -> Any:
        return self._locator

    # -- queries ------------------------------------------------------------

    async def query_all(self, selector: str) -> Sequence[PlaywrightElement]:
        matches = self._locator.locator(selector)
        count = await matches.count()
        return [PlaywrightElement(matches.nth(i)) for i in range(count)]

    async def query(self, selector: str) -> PlaywrightElement | None:
        matches = self._locator.locator(selector)
        if await matches.count() == 0:
            return None
        return PlaywrightElement(matches.first)

    async def parent(self) -> PlaywrightElement | None:
        parent = self._locator.locator("xpath=..")
        if await parent.count() == 0:
            return None
        return PlaywrightElement(parent.first)

    async def get_attribute(self, name: str) -> str | None:
        return await self._locator.get_attribute(name)

    async def tag_name(self) -> str:
        return str(await self._locator.evaluate("(el) => el.tagName")).lower()

    async def text_content(self) -> str:
        return (await self._locator.text_content()) or ""

    async def visible_text(self) -> str:
        return str(await self._locator.evaluate(_VISIBLE_TEXT_JS))

    async def input_value(self) -> str:
        return await self._locator.input_value()

    async def is_visible(self) -> bool:
        return await self._locator.is_visible()

    async def is_enabled(self) -> bool:
        return await self._locator.is_enabled()

    async def is_checked(self) -> bool:
        return await self._locator.is_checked()

    # -- interactions -------------------------------------------------------

    async def click(self) -> None:
        await self._locator.click()

    async def fill(self, value: str) -> None:
        await self._locator.fill(value)

    async def type_text(self, value: str, *, delay_ms: int = 0) -> None:
        await self._locator.press_sequentially(value, delay=delay_ms)

    async def set_checked(self, checked: bool) -> None:
        await self._locator.set_checked(checked)

    async def select_option(self, value: str) -> None:
        await self._locator.select_option(value=value)

    async def set_input_files(self, path: str) -> None:
        await self._locator.set_input_files(path)

    async def scroll_into_view(self) -> None:
        await self._locator.scroll_into_view_if_needed()

    async def scroll_by(self, pixels: int) -> None:
        await self._locator.evaluate("(el, px) => el.scrollBy(0, px)", pixels)

    async def wait_until_visible(self, timeout_ms: int) -> bool:
        try:
            await self._locator.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True


class PlaywrightWizardPage:
    """WizardPagePort over a Playwright ``Page``."""

    def __init__(self, page: Any) -> None:
        self._page = page

    async def query_all(self, selector: str) -> Sequence[PlaywrightElement]:
        matches = self._page.locator(selector)
        count = await matches.count()
        return [PlaywrightElement(matches.nth(i)) for i in range(count)]

    async def query(self, selector: str) -> PlaywrightElement | None:
        matches = self._page.locator(selector)
        if await matches.count() == 0:
            return None
        return PlaywrightElement(matches.first)

    async def wait(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    async def wait_for(
        self,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: int = 5000,
    ) -> bool:
        try:
            await self._page.wait_for_selector(selector, state=state, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True

    async def press_key(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def content(self) -> str:
        return await self._page.content()

    async def render_pdf(self, html: str, path: str) -> None:
        # PDF output only works in headless Chromium; a scratch page keeps
        # the wizard page untouched.
        scratch = await self._page.context.new_page()
        try:
            await scratch.set_content(html, wait_until="domcontentloaded")
            await scratch.pdf(
                path=path,
                format="Letter",
                margin={"top": "1in", "bottom": "1in", "left": "1in", "right": "1in"},
            )
        finally:
            await scratch.close()

    async def upload_via_file_chooser(self, trigger: PlaywrightElement, path: str) -> bool:
        try:
            async with self._page.expect_file_chooser(timeout=5000) as chooser_info:
                await trigger.click()
            chooser = await chooser_info.value
            await chooser.set_files(path)
        except PlaywrightError:
            return False
        return True
