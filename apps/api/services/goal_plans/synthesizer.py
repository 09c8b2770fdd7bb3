"""
Text synthesis capability.

Every generative stage talks to a TextSynthesizer: give it a JSON shape and a
system/user prompt pair, get back a parsed dict or a SynthesisError. There is
no retry here; callers treat any SynthesisError as terminal for that attempt
and switch to their deterministic fallback.

Clients are injected rather than built per call so tests can pass fakes.
"""

import json
import logging
import time
from typing import Any, Dict, Optional, Protocol

from anthropic import Anthropic
from openai import OpenAI

from core.config import settings

logger = logging.getLogger(__name__)


class SynthesisError(Exception):
    """The generative call failed or returned something that is not a JSON object."""


class TextSynthesizer(Protocol):
    def complete(self, schema: Dict[str, Any], system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        ...


def _schema_instruction(schema: Dict[str, Any]) -> str:
    return (
        "\n\nRespond ONLY with a valid JSON object matching this shape:\n"
        + json.dumps(schema, indent=2)
    )


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse the outermost JSON object in a model reply.

    Tolerates prose or code fences around the object.
    """
    if not text or "{" not in text or "}" not in text:
        raise SynthesisError("Response contained no JSON object")
    json_start = text.find("{")
    json_end = text.rfind("}") + 1
    try:
        parsed = json.loads(text[json_start:json_end])
    except json.JSONDecodeError as e:
        raise SynthesisError(f"Malformed JSON in response: {e}") from e
    if not isinstance(parsed, dict):
        raise SynthesisError("Response JSON is not an object")
    return parsed


class OpenAISynthesizer:
    """Chat Completions in JSON mode."""

    def __init__(self, client: OpenAI, model: str = None, temperature: float = None):
        self.client = client
        self.model = model or settings.GOAL_PLAN_OPENAI_MODEL
        self.temperature = settings.GOAL_PLAN_TEMPERATURE if temperature is None else temperature

    def complete(self, schema: Dict[str, Any], system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        start = time.monotonic()
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt + _schema_instruction(schema)},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except Exception as e:
            raise SynthesisError(f"OpenAI call failed: {e}") from e

        latency_ms = int((time.monotonic() - start) * 1000)
        logger.debug(f"OpenAI synthesis completed in {latency_ms}ms ({self.model})")

        if not completion.choices:
            raise SynthesisError("OpenAI returned no choices")
        return extract_json_object(completion.choices[0].message.content)


class AnthropicSynthesizer:
    """Messages API; the JSON object is extracted from the text reply."""

    def __init__(self, client: Anthropic, model: str = None, temperature: float = None, max_tokens: int = None):
        self.client = client
        self.model = model or settings.GOAL_PLAN_ANTHROPIC_MODEL
        self.temperature = settings.GOAL_PLAN_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.GOAL_PLAN_MAX_TOKENS

    def complete(self, schema: Dict[str, Any], system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt + _schema_instruction(schema),
                messages=[{"role": "user", "content": user_prompt}],
            )
        except Exception as e:
            raise SynthesisError(f"Anthropic call failed: {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )
        return extract_json_object(text)


def get_text_synthesizer() -> Optional[TextSynthesizer]:
    """
    Build the configured synthesizer, or None if no provider key is set.

    With None, every generative stage goes straight to its fallback.
    """
    provider = settings.GOAL_PLAN_LLM_PROVIDER.lower()
    try:
        if provider == "anthropic" and settings.ANTHROPIC_API_KEY:
            return AnthropicSynthesizer(Anthropic(api_key=settings.ANTHROPIC_API_KEY))
        if settings.OPENAI_API_KEY:
            return OpenAISynthesizer(OpenAI(api_key=settings.OPENAI_API_KEY))
    except Exception as e:
        logger.warning(f"Text synthesizer not initialized ({provider}): {e}")
        return None

    logger.info("No LLM provider key configured; goal plans will use deterministic fallbacks")
    return None
