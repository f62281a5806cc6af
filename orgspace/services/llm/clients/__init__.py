"""LLM Clients Package - Provider implementations."""
from .base import BaseLLMClient, EmptyResponseError, GenerationResult
from .anthropic import AnthropicClient
from .gemini import GeminiClient, GeminiHTTPError
from .openai import OpenAIClient

__all__ = [
    "BaseLLMClient",
    "EmptyResponseError",
    "GenerationResult",
    "AnthropicClient",
    "GeminiClient",
    "GeminiHTTPError",
    "OpenAIClient",
]
