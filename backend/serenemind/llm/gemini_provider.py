"""
Google Gemini LLM Provider.
Talks to the Generative Language REST API (models/{model}:generateContent).
"""

import logging
from typing import Any, Dict, List, Optional

from .base import LLMProvider, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Provider for Google's Gemini models.
    System messages become the request's systemInstruction; assistant
    turns are sent with Gemini's "model" role.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        default_temperature: float = 0.7,
        default_max_tokens: Optional[int] = None,
        timeout: float = 120.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _build_payload(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        system_parts = []
        contents = []
        for msg in messages:
            if msg.role == "system":
                system_parts.append({"text": msg.content})
                continue
            role = "model" if msg.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": msg.content}]})

        generation_config: Dict[str, Any] = {
            "temperature": temperature if temperature is not None else self.default_temperature,
        }
        max_output = max_tokens or self.default_max_tokens
        if max_output:
            generation_config["maxOutputTokens"] = max_output

        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": generation_config,
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Send request to the generateContent endpoint."""
        model = kwargs.get("model", self.model)
        url = f"{self.base_url}/models/{model}:generateContent"
        data = await self._post_json(url, self._build_payload(messages, temperature, max_tokens), model)

        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason", "unknown")
            raise ValueError(f"Gemini returned no candidates (block reason: {block_reason})")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        content = "".join(part.get("text", "") for part in parts)

        usage_meta = data.get("usageMetadata", {})
        usage = {
            "prompt_tokens": usage_meta.get("promptTokenCount", 0),
            "completion_tokens": usage_meta.get("candidatesTokenCount", 0),
            "total_tokens": usage_meta.get("totalTokenCount", 0),
        }
        logger.debug(f"Gemini usage: {usage}")

        return LLMResponse(
            content=content,
            model=data.get("modelVersion", model),
            usage=usage,
            raw=data,
        )
