import asyncio
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Union

from classification.intent_classifier import IntentClassifier
from classification.intent_model import build_intent_model
from execution.action_executor import ActionExecutor, ExecutionOptions, ProgressCallback
from execution.handlers import ActionHandlers
from extraction.entity_extractor import EntityExtractor
from integration.permissions import StaticPermissionService
from momentum.config import Settings
from momentum.models import ActionResult, AnalysisResult, IntentResult, RawInput
from scheduling.temporal_reasoner import TemporalReasoner
from suggestion.action_suggester import ActionSuggester

logger = logging.getLogger(__name__)


def _as_raw_input(item: Union[RawInput, str]) -> RawInput:
    if isinstance(item, RawInput):
        return item
    return RawInput(text=item or "")


class BackendAPI:
    """Central orchestration component of the Momentum pipeline.

    Every stage is passed in (or built from settings) so tests can swap any
    of them for a fake.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[EntityExtractor] = None,
        classifier: Optional[IntentClassifier] = None,
        reasoner: Optional[TemporalReasoner] = None,
        suggester: Optional[ActionSuggester] = None,
        executor: Optional[ActionExecutor] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or Settings()
        self.clock = clock
        self.extractor = extractor or EntityExtractor(clock=clock)
        self.classifier = classifier or IntentClassifier(
            min_confidence=self.settings.intent_min_confidence
        )
        self.reasoner = reasoner or TemporalReasoner(clock=clock)
        self.suggester = suggester or ActionSuggester(
            settings=self.settings, reasoner=self.reasoner, clock=clock
        )
        self.executor = executor or ActionExecutor(
            permissions=StaticPermissionService(
                self.settings.granted_permissions,
                grant_on_request=self.settings.request_permissions_on_demand,
            ),
            handlers=ActionHandlers(reasoner=self.reasoner),
            options=ExecutionOptions.from_settings(self.settings),
            clock=clock,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackendAPI":
        classifier = IntentClassifier(
            model=build_intent_model(settings),
            min_confidence=settings.intent_min_confidence,
        )
        return cls(settings=settings, classifier=classifier)

    async def analyze(self, raw_input: Union[RawInput, str]) -> AnalysisResult:
        """Extract, classify, reason about time and suggest actions for one input."""
        raw_input = _as_raw_input(raw_input)
        text = raw_input.text

        try:
            # 1. Entities
            entities = self.extractor.extract(text)

            # 2. Intent
            intent = await self.classifier.classify(text)

            # 3. Deadline / urgency / reminder
            temporal = self.reasoner.analyze_temporal(entities, text)

            # 4. Suggested actions
            actions = self.suggester.suggest(intent, entities, text, context_id=raw_input.id)
        except Exception as e:
            logger.exception(f"Analysis of input {raw_input.id} failed")
            return self._failed_analysis(raw_input, str(e) or type(e).__name__)

        logger.info(
            f"Analysed input {raw_input.id}: intent={intent.intent} "
            f"({intent.source}, {intent.confidence:.2f}), "
            f"{len(entities)} entities, {len(actions)} actions"
        )
        return AnalysisResult(
            context_id=raw_input.id,
            source=raw_input.source,
            entities=entities,
            intent=intent,
            temporal=temporal,
            suggested_actions=actions,
            timestamp=self.clock(),
        )

    async def analyze_batch(self, inputs: Iterable[Union[RawInput, str]]) -> List[AnalysisResult]:
        return [await self.analyze(item) for item in inputs]

    async def analyze_concurrently(self, inputs: Iterable[Union[RawInput, str]]) -> List[AnalysisResult]:
        """Analyse all inputs at once; a failing item does not affect the others."""
        raw_inputs = [_as_raw_input(item) for item in inputs]
        outcomes = await asyncio.gather(
            *(self.analyze(item) for item in raw_inputs), return_exceptions=True
        )

        results: List[AnalysisResult] = []
        for raw_input, outcome in zip(raw_inputs, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Concurrent analysis of {raw_input.id} failed: {outcome}")
                results.append(self._failed_analysis(raw_input, str(outcome) or type(outcome).__name__))
            else:
                results.append(outcome)
        return results

    async def execute(
        self,
        action,
        options: Optional[ExecutionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ActionResult:
        return await self.executor.execute(action, options, on_progress)

    async def execute_batch(
        self,
        actions,
        options: Optional[ExecutionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ActionResult]:
        return await self.executor.execute_batch(actions, options, on_progress)

    async def warm_up(self) -> bool:
        """Load the primary intent model if one is configured."""
        model = self.classifier.model
        if model is None:
            return False
        if model.is_ready():
            return True
        return await model.load()

    def _failed_analysis(self, raw_input: RawInput, error: str) -> AnalysisResult:
        return AnalysisResult(
            context_id=raw_input.id,
            source=raw_input.source,
            intent=IntentResult(intent="other", confidence=0.0),
            success=False,
            error=error,
            timestamp=self.clock(),
        )
