import json
import logging
import os
from typing import Dict, Iterable, Optional

from pydantic import ValidationError

from llm.providers.base import LLMProvider
from llm.schemas import IntentScores

logger = logging.getLogger(__name__)

INTENT_SYSTEM_PROMPT = (
    "You are an intent classifier for short captured notes, chat excerpts and "
    "voice transcripts (often Korean). Reply with JSON only."
)


def build_provider(name: str) -> LLMProvider:
    """Return the provider registered under `name` (mock, openai, ollama)."""
    name = (name or "").strip().lower()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider

        return OpenAIProvider()
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider

        return OllamaProvider()
    raise ValueError(f"Unknown LLM provider: {name!r}")


def _extract_json_object(text: str) -> Optional[str]:
    """Pull the first balanced {...} block out of a chatty model reply."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    candidate = text[start : i + 1]
                    try:
                        json.loads(candidate)
                        return candidate
                    except json.JSONDecodeError:
                        break
        start = text.find("{", start + 1)
    return None


class LLMClient:
    """Thin wrapper around an LLM provider with a 'model tier' knob.

    The provider returns raw text; this client is responsible for finding and
    validating the JSON inside it.
    """

    def __init__(self, provider: LLMProvider, model_tier: str = "large"):
        self.provider = provider
        self.model_tier = model_tier

    def _select_model_name(self, model_tier: str) -> Optional[str]:
        if model_tier == "small":
            return os.getenv("LLM_MODEL_SMALL") or None
        return os.getenv("LLM_MODEL_LARGE") or None

    def complete(self, prompt: str, system: str = INTENT_SYSTEM_PROMPT) -> str:
        raw = self.provider.generate(
            system=system,
            user=prompt,
            model=self._select_model_name(self.model_tier),
        )
        extracted = _extract_json_object(raw or "")
        if extracted is None:
            logger.warning(f"LLM returned no JSON object: {str(raw)[:80]!r}")
            return "{}"
        return extracted

    def score_intents(self, text: str, labels: Iterable[str]) -> Dict[str, float]:
        labels = list(labels)
        prompt = (
            "Score the intent of the following text.\n"
            f"Labels: {', '.join(labels)}\n"
            'Return JSON like {"scores": {"<label>": <0..1>, ...}}.\n'
            f"Text: {text}"
        )
        out = self.complete(prompt)
        try:
            parsed = IntentScores.model_validate(json.loads(out))
        except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed intent scores: {e}")
            return {}
        return {label: score for label, score in parsed.scores.items() if label in labels}
