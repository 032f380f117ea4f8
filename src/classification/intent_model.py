from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from classification.keywords import INTENT_KEYWORDS, INTENT_LABELS, keyword_hits, winner_confidence
from llm.llm_client import LLMClient, build_provider
from momentum.config import Settings

logger = logging.getLogger(__name__)


class ModelUnavailableError(RuntimeError):
    pass


class IntentModel(ABC):
    """Capability interface for a primary intent scorer."""

    name: str = "model"

    @abstractmethod
    def is_ready(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def load(self) -> bool:
        """Try to make the model ready; False (never an exception) on failure."""
        raise NotImplementedError

    @abstractmethod
    async def predict(self, text: str) -> Dict[str, float]:
        """Per-label scores. Raises ModelUnavailableError when not loaded."""
        raise NotImplementedError


class KeywordIntentModel(IntentModel):
    name = "keyword"

    def is_ready(self) -> bool:
        return True

    async def load(self) -> bool:
        return True

    async def predict(self, text: str) -> Dict[str, float]:
        hits = keyword_hits(text, INTENT_KEYWORDS)
        return {label: (winner_confidence(n) if n else 0.0) for label, n in hits.items()}


class LLMIntentModel(IntentModel):
    """Learned-model adapter: asks an LLM provider for per-label scores."""

    def __init__(
        self,
        provider_name: str = "mock",
        model_tier: str = "large",
        client: Optional[LLMClient] = None,
    ):
        self.provider_name = provider_name
        self.model_tier = model_tier
        self.name = f"llm:{provider_name}"
        self._client = client

    def is_ready(self) -> bool:
        return self._client is not None

    async def load(self) -> bool:
        if self._client is not None:
            return True
        try:
            provider = build_provider(self.provider_name)
        except Exception as e:
            logger.warning(f"Intent model {self.name} failed to load: {e}")
            return False
        self._client = LLMClient(provider=provider, model_tier=self.model_tier)
        logger.info(f"Intent model {self.name} loaded (tier: {self.model_tier})")
        return True

    async def predict(self, text: str) -> Dict[str, float]:
        if self._client is None:
            raise ModelUnavailableError(f"{self.name} is not loaded")
        # providers use blocking HTTP clients
        return await asyncio.to_thread(self._client.score_intents, text, INTENT_LABELS)


def build_intent_model(settings: Settings) -> Optional[IntentModel]:
    backend = settings.intent_backend
    if backend in {"", "none", "fallback"}:
        return None
    if backend == "keyword":
        return KeywordIntentModel()
    if backend in {"mock", "openai", "ollama"}:
        return LLMIntentModel(provider_name=backend, model_tier=settings.llm_tier)
    logger.warning(f"Unknown INTENT_BACKEND {backend!r}; using keyword fallback only")
    return None
