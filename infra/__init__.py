"""Infrastructure adapters: concrete implementations of domain ports."""

from .browser import PlaywrightBrowserSession, PlaywrightWizardPage
from .config import FileSystemConfigProvider
from .interaction import ConsoleStatusObserver
from .llm import LLMAnswerGenerator, OpenAIChatClient
from .logs import FileSystemDebugArtifactStore
from .persistence import SQLiteAnswerRepository
from .runtime import StructuredLogger, SystemClock, TimestampRunIdGenerator

__all__ = [
    "PlaywrightBrowserSession",
    "PlaywrightWizardPage",
    "FileSystemConfigProvider",
    "ConsoleStatusObserver",
    "OpenAIChatClient",
    "LLMAnswerGenerator",
    "FileSystemDebugArtifactStore",
    "SQLiteAnswerRepository",
    "SystemClock",
    "TimestampRunIdGenerator",
    "StructuredLogger",
]
