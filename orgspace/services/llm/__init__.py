"""LLM Infrastructure Package - Shared LLM client utilities."""
from .factory import get_llm_client
from .clients import (
    BaseLLMClient,
    GenerationResult,
    AnthropicClient,
    GeminiClient,
    OpenAIClient,
)
from .provider import FALLBACK_MODEL, generate_ai_text

__all__ = [
    "get_llm_client",
    "generate_ai_text",
    "FALLBACK_MODEL",
    "BaseLLMClient",
    "GenerationResult",
    "AnthropicClient",
    "GeminiClient",
    "OpenAIClient",
]
