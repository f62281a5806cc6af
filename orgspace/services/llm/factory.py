"""
LLM Client Factory - Provider selection and instantiation.

Single point of configuration for switching between LLM providers.
"""
from .clients.base import BaseLLMClient
from .clients.anthropic import AnthropicClient
from .clients.gemini import GeminiClient
from .clients.openai import OpenAIClient
from orgspace.core.config import settings

PROVIDERS = ("gemini", "anthropic", "openai")


def provider_api_key(provider: str | None = None) -> str:
    """Configured API key for a provider ('' when unset or unknown)."""
    p = (provider or settings.AI_PROVIDER).lower()
    return {
        "gemini": settings.GEMINI_API_KEY,
        "anthropic": settings.ANTHROPIC_API_KEY,
        "openai": settings.OPENAI_API_KEY,
    }.get(p, "")


def get_llm_client(
    provider: str | None = None,
    model: str | None = None,
) -> BaseLLMClient:
    """
    Factory function to get LLM client.

    Args:
        provider: Override provider (defaults to settings.AI_PROVIDER)
        model: Override model (defaults to provider's configured model)

    Returns:
        LLM client instance (Gemini, Anthropic or OpenAI)

    Raises:
        ValueError: If provider not recognized or API key missing
    """
    p = (provider or settings.AI_PROVIDER).lower()
    if p == "gemini":
        return GeminiClient(model=model)
    elif p == "anthropic":
        return AnthropicClient(model=model)
    elif p == "openai":
        return OpenAIClient(model=model)
    else:
        raise ValueError(f"Unknown LLM provider: {p}. Use one of {', '.join(PROVIDERS)}.")
