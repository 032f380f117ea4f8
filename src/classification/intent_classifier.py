from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from classification.intent_model import IntentModel
from classification.keywords import (
    INTENT_KEYWORDS,
    INTENT_LABELS,
    alternative_confidence,
    keyword_hits,
    social_event_type,
    winner_confidence,
)
from momentum.models import IntentAlternative, IntentResult

logger = logging.getLogger(__name__)


def _clamp(score) -> float:
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0.0
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, value))


class IntentClassifier:
    """Two-tier intent classification.

    The primary tier asks an optional IntentModel for per-label scores. When
    the model is missing, cannot load, raises, or is not confident enough,
    a deterministic keyword scorer answers instead. classify() never raises.
    """

    def __init__(self, model: Optional[IntentModel] = None, min_confidence: float = 0.6):
        self.model = model
        self.min_confidence = min_confidence

    async def classify(self, text: Optional[str]) -> IntentResult:
        text = text or ""
        if not text.strip():
            return self.fallback(text)

        result = await self._classify_with_model(text)
        if result is None:
            result = self.fallback(text)
        return self._with_event_type(result, text)

    async def classify_many(self, texts: Iterable[Optional[str]]) -> List[IntentResult]:
        return [await self.classify(t) for t in texts]

    async def _classify_with_model(self, text: str) -> Optional[IntentResult]:
        if self.model is None:
            return None

        try:
            if not self.model.is_ready():
                loaded = await self.model.load()
                if not loaded:
                    logger.warning(f"Intent model {self.model.name} unavailable; using keyword fallback")
                    return None
            raw_scores = await self.model.predict(text)
        except Exception as e:
            logger.warning(f"Intent model {self.model.name} failed ({e}); using keyword fallback")
            return None

        if raw_scores is None:
            raw_scores = {}
        if not isinstance(raw_scores, Mapping):
            logger.warning(
                f"Intent model {self.model.name} returned {type(raw_scores).__name__}, not a score mapping"
            )
            return None

        scores: Dict[str, float] = {
            label: _clamp(score)
            for label, score in raw_scores.items()
            if label in INTENT_LABELS
        }
        if not scores:
            logger.warning(f"Intent model {self.model.name} returned no usable scores")
            return None

        # stable sort keeps label table order on ties
        ranked = sorted(
            ((label, scores[label]) for label in INTENT_LABELS if label in scores),
            key=lambda pair: pair[1],
            reverse=True,
        )
        top_label, top_score = ranked[0]
        if top_score < self.min_confidence:
            logger.info(
                f"Intent model confidence {top_score:.2f} below {self.min_confidence:.2f}; "
                "using keyword fallback"
            )
            return None

        alternatives = [
            IntentAlternative(intent=label, confidence=round(score, 4))
            for label, score in ranked[1:3]
            if score > 0
        ]
        return IntentResult(
            intent=top_label,
            confidence=round(top_score, 4),
            alternatives=alternatives or None,
            source="model",
        )

    def fallback(self, text: str) -> IntentResult:
        """Keyword scoring. Deterministic for a given text."""
        hits = keyword_hits(text, INTENT_KEYWORDS)

        best_label, best_hits = "other", 0
        for label, count in hits.items():
            if count > best_hits:
                best_label, best_hits = label, count

        others = [(label, count) for label, count in hits.items() if count > 0 and label != best_label]
        others.sort(key=lambda pair: pair[1], reverse=True)
        alternatives = [
            IntentAlternative(intent=label, confidence=alternative_confidence(count))
            for label, count in others[:2]
        ]

        return IntentResult(
            intent=best_label,
            confidence=winner_confidence(best_hits),
            alternatives=alternatives or None,
            source="fallback",
        )

    @staticmethod
    def _with_event_type(result: IntentResult, text: str) -> IntentResult:
        if result.intent != "social":
            return result
        return result.model_copy(update={"event_type": social_event_type(text)})
