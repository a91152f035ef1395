"""Prompt templates for the answer-generation capability."""

from .answer_prompts import (  # noqa: F401
    build_checkbox_prompt,
    build_numeric_prompt,
    build_options_prompt,
    build_retry_prompt,
    build_textual_prompt,
    profile_block,
)
from .system_prompt import SYSTEM_PROMPT  # noqa: F401

__all__ = [
    "SYSTEM_PROMPT",
    "profile_block",
    "build_textual_prompt",
    "build_numeric_prompt",
    "build_options_prompt",
    "build_checkbox_prompt",
    "build_retry_prompt",
]
