"""LLM client for narrative generation, supporting Anthropic, Gemini, and Ollama."""

import asyncio
import logging

import anthropic
import httpx

from rapport.config import settings

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_RATE_LIMIT_ATTEMPTS = 4


class LLMClient:
    """Async single-turn text generation over one configured provider."""

    def __init__(self, provider: str | None = None, api_key: str | None = None):
        self.provider = provider or settings.llm_provider
        self._http_client: httpx.AsyncClient | None = None

        if self.provider == "anthropic":
            key = api_key or settings.anthropic_api_key
            if not key:
                raise ValueError("RAPPORT_ANTHROPIC_API_KEY is required when using anthropic provider")
            self.anthropic_client = anthropic.AsyncAnthropic(api_key=key)
        elif self.provider == "gemini":
            self.gemini_api_key = api_key or settings.gemini_api_key
            if not self.gemini_api_key:
                raise ValueError("RAPPORT_GEMINI_API_KEY is required when using gemini provider")
        elif self.provider == "ollama":
            self.ollama_base_url = settings.ollama_base_url
        else:
            raise ValueError(f"Unknown LLM provider: {self.provider}")

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=settings.narrative_timeout_seconds)
        return self._http_client

    async def generate(
        self,
        system: str,
        user_message: str,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        model = model or settings.resolved_narrative_model
        max_tokens = max_tokens or settings.max_narrative_tokens
        if self.provider == "gemini":
            return await self._gemini_generate(system, user_message, model, max_tokens)
        elif self.provider == "anthropic":
            return await self._anthropic_generate(system, user_message, model, max_tokens)
        else:
            return await self._ollama_generate(system, user_message, model, max_tokens)

    # --- Gemini ---

    async def _gemini_generate(self, system: str, user_message: str, model: str, max_tokens: int) -> str:
        client = await self._get_http_client()
        url = f"{GEMINI_API_URL}/{model}:generateContent?key={self.gemini_api_key}"
        payload = {
            "system_instruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user_message}]}],
            "generationConfig": {"maxOutputTokens": max_tokens, "temperature": 0.7},
        }

        for attempt in range(GEMINI_RATE_LIMIT_ATTEMPTS):
            response = await client.post(url, json=payload)
            if response.status_code != 429:
                break
            wait = min(2**attempt * 2, 20)
            logger.info("Gemini rate limited, waiting %ds (attempt %d)", wait, attempt + 1)
            await asyncio.sleep(wait)

        response.raise_for_status()
        return self._extract_gemini_text(response.json())

    def _extract_gemini_text(self, data: dict) -> str:
        candidates = data.get("candidates", [])
        if not candidates:
            logger.error("Gemini returned no candidates: %s", data)
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts)

    # --- Anthropic ---

    async def _anthropic_generate(self, system: str, user_message: str, model: str, max_tokens: int) -> str:
        response = await self.anthropic_client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": user_message}],
        )
        return "".join(block.text for block in response.content if block.type == "text")

    # --- Ollama ---

    async def _ollama_generate(self, system: str, user_message: str, model: str, max_tokens: int) -> str:
        client = await self._get_http_client()
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user_message},
            ],
            "stream": False,
            "options": {"num_predict": max_tokens},
        }
        response = await client.post(f"{self.ollama_base_url}/api/chat", json=payload)
        response.raise_for_status()
        return response.json()["message"]["content"]

    async def close(self):
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()


# Shared instance
_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Return the shared client. Raises ValueError when the provider is not configured."""
    global _client
    if _client is None:
        _client = LLMClient()
    return _client
