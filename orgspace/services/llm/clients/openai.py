"""
OpenAI (GPT) LLM Client Implementation.

Features:
- Automatic retry with exponential backoff (3 attempts)
- Retries: rate limits, connection errors, timeouts, server errors (5xx)
- Exponential backoff: 1-10 seconds between retries
- Async API calls
"""
import openai
from tenacity import (
    retry,
    wait_exponential,
    stop_after_attempt,
    retry_if_exception_type
)
from .base import BaseLLMClient, GenerationResult
from orgspace.core.config import settings


class OpenAIClient(BaseLLMClient):
    """
    OpenAI GPT API client.

    Handles API communication with retry logic.
    Prompts provided by domain modules.
    """

    def __init__(self, model: str | None = None):
        """Initialize OpenAI async client."""
        if not settings.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY not set in environment")

        self.client = openai.AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
        self.model = model or settings.OPENAI_MODEL

    @retry(
        retry=retry_if_exception_type((
            openai.RateLimitError,
            openai.APIConnectionError,
            openai.APITimeoutError,
            openai.InternalServerError,  # 5xx errors when servers overloaded
        )),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> GenerationResult:
        """Call OpenAI Chat Completions API with automatic retry."""
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.model,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            messages=messages,
        )

        text = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        return GenerationResult(
            text=self.require_text(text, "openai"),
            model=self.model,
            tokens_in=getattr(usage, "prompt_tokens", None),
            tokens_out=getattr(usage, "completion_tokens", None),
        )
