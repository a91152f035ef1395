"""
Reusable fakes and in-memory implementations for tests.
"""

from .fake_answer_repository import InMemoryAnswerRepository
from .fake_config_provider import InMemoryConfigProvider
from .fake_dom import FakeElement, FakeWizardPage, h
from .fake_runtime import (
    FixedClock,
    InMemoryDebugArtifactStore,
    InMemoryLogger,
    RecordingStatusObserver,
    SequentialIdGenerator,
)
from .scripted_answer_generator import ScriptedAnswerGenerator
from .scripted_llm_client import ScriptedLLMClient

__all__ = [
    "FakeElement",
    "FakeWizardPage",
    "h",
    "InMemoryAnswerRepository",
    "InMemoryConfigProvider",
    "FixedClock",
    "SequentialIdGenerator",
    "InMemoryLogger",
    "InMemoryDebugArtifactStore",
    "RecordingStatusObserver",
    "ScriptedAnswerGenerator",
    "ScriptedLLMClient",
]
