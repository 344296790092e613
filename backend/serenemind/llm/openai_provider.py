"""
OpenAI-compatible LLM Provider.
Works with any endpoint exposing the Chat Completions API format.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import LLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Provider for OpenAI and OpenAI-compatible chat/completions endpoints."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        default_temperature: float = 0.7,
        default_max_tokens: Optional[int] = 2048,
        timeout: float = 120.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Send request to the Chat Completions endpoint."""
        model = kwargs.get("model", self.model)
        payload: Dict[str, Any] = {
            "model": model,
            "messages": self._format_messages(messages),
            "temperature": temperature if temperature is not None else self.default_temperature,
        }
        if max_tokens or self.default_max_tokens:
            payload["max_tokens"] = max_tokens or self.default_max_tokens

        data = await self._post_json(f"{self.base_url}/chat/completions", payload, model)

        choice = data["choices"][0]
        usage = data.get("usage", {})
        logger.debug(f"OpenAI usage: {usage}")

        return LLMResponse(
            content=choice["message"]["content"] or "",
            model=data.get("model", model),
            usage=usage,
            raw=data,
        )
