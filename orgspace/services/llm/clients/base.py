"""
Base LLM Client - Abstract interface for multi-provider support.

Defines the generic text-generation call shared by every provider.
Provider-specific implementations in gemini.py, anthropic.py and openai.py.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class EmptyResponseError(Exception):
    """Provider answered successfully but produced no text."""


@dataclass(frozen=True)
class GenerationResult:
    """Text produced by a provider plus whatever token counts it reported."""
    text: str
    model: str
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients.

    Separates infrastructure (API calls) from domain logic (prompts).
    """

    model: str

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> GenerationResult:
        """
        Async text generation with provider-specific implementation.

        Args:
            prompt: User prompt text
            system_instruction: Optional system prompt

        Returns:
            GenerationResult with non-empty text

        Raises:
            EmptyResponseError: provider returned no text
            Provider-specific exceptions (transient ones retried by tenacity)
        """

    @staticmethod
    def require_text(text: str | None, provider: str) -> str:
        """Strip the response text; empty output is a failure."""
        value = (text or "").strip()
        if not value:
            raise EmptyResponseError(f"{provider.upper()}_EMPTY_RESPONSE")
        return value
