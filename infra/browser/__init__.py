from .playwright_page import PlaywrightElement, PlaywrightWizardPage
from .playwright_session import ENTRY_BUTTON_SELECTORS, PlaywrightBrowserSession

__all__ = [
    "PlaywrightBrowserSession",
    "PlaywrightWizardPage",
    "PlaywrightElement",
    "ENTRY_BUTTON_SELECTORS",
]
