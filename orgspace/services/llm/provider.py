"""
Text generation entry point used by domain services.

Chooses between the configured provider and the local fallback text, and
normalizes every provider failure into AIProviderError.
"""
import logging

from .clients.base import BaseLLMClient, GenerationResult
from .factory import get_llm_client, provider_api_key
from orgspace.core.config import settings
from orgspace.domain.exceptions import AIProviderError

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "demo-project-report-v1"


def fallback_enabled() -> bool:
    """Fallback text is used when forced or when the provider has no key."""
    return settings.AI_FORCE_FALLBACK or not provider_api_key()


async def generate_ai_text(
    prompt: str,
    system_instruction: str | None,
    fallback_text: str,
    client: BaseLLMClient | None = None,
) -> GenerationResult:
    """
    Generate text with the configured provider.

    An explicit `client` always wins over the fallback decision. Token
    counts are passed through as reported (None when the provider is silent).

    Raises:
        AIProviderError: any failure building or calling the provider
    """
    if client is None and fallback_enabled():
        logger.info("AI fallback in use (provider=%s)", settings.AI_PROVIDER)
        return GenerationResult(text=fallback_text, model=FALLBACK_MODEL)

    try:
        llm = client or get_llm_client()
        return await llm.generate(prompt, system_instruction=system_instruction)
    except Exception as exc:
        logger.warning("AI provider call failed: %s", exc)
        raise AIProviderError(exc) from exc
