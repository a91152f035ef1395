"""LLM adapters: the chat client and the answer generator built on it."""

from .llm_answer_generator import LLMAnswerGenerator
from .openai_chat_client import OpenAIChatClient

__all__ = ["OpenAIChatClient", "LLMAnswerGenerator"]
