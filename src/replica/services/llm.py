"""OpenAI-compatible chat-completions client using httpx.

Used by the structure analyzer for JSON-mode text tasks.  Retries live
here: network errors, read timeouts and HTTP errors are retried with
exponential backoff; callers above this layer never retry.
"""

import asyncio
import logging
from dataclasses import dataclass

import httpx

from replica.config import Settings
from replica.exceptions import LLMResponseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatResponse:
    content: str
    model: str
    prompt_tokens: int | None = None
    completion_tokens: int | None = None


class ChatClient:
    """Async client for ``POST {base_url}/chat/completions``."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.llm_base_url.rstrip("/")
        self._api_key = settings.llm_api_key
        self._model = settings.llm_model_name
        self._temperature = settings.llm_temperature
        self._max_tokens = settings.llm_max_tokens
        self._max_retries = settings.llm_max_retries
        self._retry_delay = settings.llm_retry_delay
        self._semaphore = asyncio.Semaphore(settings.llm_max_concurrent)
        if not self._api_key:
            logger.warning("LLM_API_KEY is not set; enrichment calls will fail and fall back to defaults")
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=30.0,
                read=settings.llm_timeout,
                write=30.0,
                pool=30.0,
            ),
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        json_format: bool = False,
        max_tokens: int | None = None,
    ) -> ChatResponse:
        """Send a chat completion request, retrying transient failures."""
        last_error: Exception | None = None
        max_attempts = 1 + self._max_retries

        for attempt in range(1, max_attempts + 1):
            try:
                async with self._semaphore:
                    return await self._do_chat(
                        messages,
                        temperature=temperature,
                        json_format=json_format,
                        max_tokens=max_tokens,
                    )
            except (httpx.ReadTimeout, httpx.ConnectError, httpx.HTTPStatusError) as e:
                last_error = e
                if attempt >= max_attempts:
                    raise
                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(
                    "LLM attempt %d/%d failed, retry in %.1fs: %s",
                    attempt,
                    max_attempts,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)

        raise last_error  # type: ignore[misc]

    async def _do_chat(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        json_format: bool = False,
        max_tokens: int | None = None,
    ) -> ChatResponse:
        """Execute a single chat request (no retry logic)."""
        payload: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self._temperature,
            "max_tokens": max_tokens if max_tokens is not None else self._max_tokens,
        }
        if json_format:
            payload["response_format"] = {"type": "json_object"}

        response = await self._client.post(f"{self._base_url}/chat/completions", json=payload)
        response.raise_for_status()
        data = response.json()

        choices = data.get("choices") or []
        if not choices:
            raise LLMResponseError("LLM response has no choices")
        content = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        logger.debug("LLM response (first 200 chars): %s", content[:200])

        return ChatResponse(
            content=content,
            model=data.get("model", self._model),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
        )

    async def is_reachable(self) -> bool:
        """Check if the LLM endpoint answers its model listing."""
        try:
            response = await self._client.get(
                f"{self._base_url}/models",
                timeout=httpx.Timeout(5.0),
            )
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._client.aclose()
