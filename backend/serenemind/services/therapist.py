"""
Therapist Client - the two provider interactions the chat flow needs:
the next assistant reply, and a structured wellness evaluation.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from ..core.exceptions import InvalidEvaluationFormat, ProviderError
from ..llm.base import LLMMessage, LLMProvider
from ..models import Evaluation, utc_now
from .prompts import build_evaluation_prompt, build_reply_prompt

logger = logging.getLogger(__name__)

SPEAKER_LABELS = {"user": "User", "assistant": "Therapist"}


def render_transcript(messages: Iterable[Mapping[str, Any]]) -> str:
    """
    Render messages as "User: ..." / "Therapist: ..." lines.

    Args:
        messages: Items with 'role' and 'content' keys

    Returns:
        Newline-joined transcript
    """
    return "\n".join(
        f"{SPEAKER_LABELS.get(msg['role'], 'Therapist')}: {msg['content']}"
        for msg in messages
    )


def extract_json_object(text: str) -> Optional[str]:
    """Substring from the first '{' to the last '}', or None if there is none."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


class TherapistClient:
    """
    Wraps an LLMProvider with the therapist and evaluator prompts.
    Every call is a single request: no streaming, no retries.
    """

    def __init__(self, provider: Optional[LLMProvider], temperature: Optional[float] = None):
        """
        Args:
            provider: Configured provider, or None when no API key is set
            temperature: Sampling temperature override for both calls
        """
        self.provider = provider
        self.temperature = temperature

    async def _complete(self, prompt: str, purpose: str) -> str:
        if self.provider is None:
            raise ProviderError(
                "LLM not configured. Set LLM_API_KEY and LLM_PROVIDER in environment to enable AI responses."
            )
        try:
            response = await self.provider.chat_completion(
                [LLMMessage.text("user", prompt)],
                temperature=self.temperature,
            )
        except Exception as e:
            raise ProviderError(f"Failed to {purpose}: {e}", upstream=e) from e
        return response.content

    async def generate_reply(self, history: List[Dict[str, str]]) -> str:
        """
        Produce the therapist's next reply for the full conversation so far.

        Args:
            history: Role/content dicts in conversation order

        Returns:
            Reply text as returned by the provider

        Raises:
            ProviderError: On transport/API failure or an empty reply
        """
        prompt = build_reply_prompt(render_transcript(history))
        reply = await self._complete(prompt, "generate response")
        if not reply.strip():
            raise ProviderError("Failed to generate response: provider returned an empty reply")
        return reply

    async def evaluate(self, transcript: str) -> Evaluation:
        """
        Produce a wellness evaluation of a rendered transcript.

        The provider is asked for bare JSON but may wrap it in prose or code
        fences, so the outermost {...} is extracted and validated field by field.

        Raises:
            InvalidEvaluationFormat: No JSON object, undecodable JSON, or invalid fields
            ProviderError: On transport/API failure
        """
        text = await self._complete(build_evaluation_prompt(transcript), "evaluate conversation")

        raw_json = extract_json_object(text)
        if raw_json is None:
            raise InvalidEvaluationFormat("Invalid evaluation format: no JSON object in response")

        try:
            payload = json.loads(raw_json)
        except json.JSONDecodeError as e:
            raise InvalidEvaluationFormat(f"Invalid evaluation format: {e}") from e
        if not isinstance(payload, dict):
            raise InvalidEvaluationFormat("Invalid evaluation format: expected a JSON object")

        # The evaluation time is ours, not the model's
        payload.pop("evaluatedAt", None)
        payload.pop("evaluated_at", None)
        # Strict: no "75" -> 75, 80.0 -> 80 or true -> 1 coercion of model output
        try:
            evaluation = Evaluation.model_validate({**payload, "evaluatedAt": utc_now()}, strict=True)
        except ValidationError as e:
            raise InvalidEvaluationFormat(
                f"Invalid evaluation format: {e.error_count()} invalid field(s)"
            ) from e

        logger.info(
            "Evaluation produced",
            extra={"extra_fields": {
                "wellness_score": evaluation.wellness_score,
                "risk_level": evaluation.risk_level,
            }}
        )
        return evaluation
