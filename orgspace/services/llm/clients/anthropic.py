"""
Anthropic (Claude) LLM Client Implementation.

Features:
- Automatic retry with exponential backoff (3 attempts)
- Retries: rate limits, connection errors, timeouts, server errors (5xx)
- Exponential backoff: 1-10 seconds between retries
- Async API calls
"""
import anthropic
from tenacity import (
    retry,
    wait_exponential,
    stop_after_attempt,
    retry_if_exception_type
)
from .base import BaseLLMClient, GenerationResult
from orgspace.core.config import settings


class AnthropicClient(BaseLLMClient):
    """
    Anthropic Claude API client.

    Handles API communication with retry logic.
    Prompts provided by domain modules.
    """

    def __init__(self, model: str | None = None):
        """Initialize Claude async client."""
        if not settings.ANTHROPIC_API_KEY:
            raise ValueError("ANTHROPIC_API_KEY not set in environment")

        self.client = anthropic.AsyncAnthropic(
            api_key=settings.ANTHROPIC_API_KEY,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
        self.model = model or settings.ANTHROPIC_MODEL

    @retry(
        retry=retry_if_exception_type((
            anthropic.RateLimitError,
            anthropic.APIConnectionError,
            anthropic.APITimeoutError,
            anthropic.InternalServerError,  # 5xx errors including 529 overload
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
        """Call Claude Messages API with automatic retry."""
        kwargs = {}
        if system_instruction:
            kwargs["system"] = system_instruction

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )

        text = "\n".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = getattr(response, "usage", None)
        return GenerationResult(
            text=self.require_text(text, "anthropic"),
            model=self.model,
            tokens_in=getattr(usage, "input_tokens", None),
            tokens_out=getattr(usage, "output_tokens", None),
        )
