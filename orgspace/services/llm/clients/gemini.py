"""
Google Gemini LLM Client Implementation (REST via httpx).

Features:
- generateContent endpoint, API key passed as query parameter
- Retries transport errors, 429 and 5xx (3 attempts, exponential backoff)
- Token counts from usageMetadata when present
"""
import httpx
from tenacity import (
    retry,
    wait_exponential,
    stop_after_attempt,
    retry_if_exception
)
from .base import BaseLLMClient, GenerationResult
from orgspace.core.config import settings


class GeminiHTTPError(Exception):
    """Non-2xx response from the Gemini API."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"GEMINI_HTTP_{status_code}")


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, GeminiHTTPError):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


class GeminiClient(BaseLLMClient):
    """
    Gemini generateContent client.

    `transport` lets callers (tests) swap the httpx transport.
    """

    def __init__(
        self,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not settings.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY not set in environment")

        self.api_key = settings.GEMINI_API_KEY
        self.base_url = settings.GEMINI_API_BASE.rstrip("/")
        self.model = model or settings.GEMINI_MODEL
        self.transport = transport

    def build_payload(self, prompt: str, system_instruction: str | None = None) -> dict:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": settings.LLM_TEMPERATURE,
                "maxOutputTokens": settings.LLM_MAX_TOKENS,
            },
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    @staticmethod
    def extract_text(data: dict) -> str:
        """Join every text part of every candidate with newlines."""
        parts = []
        for candidate in data.get("candidates") or []:
            content = candidate.get("content") or {}
            for part in content.get("parts") or []:
                text = part.get("text")
                if isinstance(text, str) and text:
                    parts.append(text)
        return "\n".join(parts)

    @retry(
        retry=retry_if_exception(_is_transient),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> GenerationResult:
        """POST generateContent and parse candidates + usageMetadata."""
        url = f"{self.base_url}/models/{self.model}:generateContent"

        async with httpx.AsyncClient(
            timeout=settings.LLM_TIMEOUT_SECONDS,
            transport=self.transport,
        ) as client:
            response = await client.post(
                url,
                params={"key": self.api_key},
                json=self.build_payload(prompt, system_instruction),
            )

        if not response.is_success:
            raise GeminiHTTPError(response.status_code)

        data = response.json()
        usage = data.get("usageMetadata") or {}
        return GenerationResult(
            text=self.require_text(self.extract_text(data), "gemini"),
            model=self.model,
            tokens_in=usage.get("promptTokenCount"),
            tokens_out=usage.get("candidatesTokenCount"),
        )
