import logging
import time
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api import state
from api.backend import BackendAPI
from api.dependencies import get_backend
from api.metrics import (
    ANALYSES_TOTAL,
    INTENT_SOURCE_TOTAL,
    RECENT_ANALYSES,
    REQUESTS_TOTAL,
    REQUEST_LATENCY_SECONDS,
)
from momentum.models import AnalysisResult, RawInput, SourceType

router = APIRouter()
logger = logging.getLogger(__name__)


class AnalyzeIn(BaseModel):
    text: str
    source: SourceType = "manual"

    def to_raw_input(self) -> RawInput:
        return RawInput(text=self.text, source=self.source)


class AnalyzeBatchIn(BaseModel):
    items: List[AnalyzeIn] = Field(default_factory=list)
    concurrent: bool = False


def _record(results: List[AnalysisResult]) -> None:
    for result in results:
        state.recent_analyses.appendleft(result.model_dump(mode="json"))
        # Prometheus counters (best-effort)
        try:
            ANALYSES_TOTAL.labels(status="success" if result.success else "failed").inc()
            INTENT_SOURCE_TOTAL.labels(
                source=result.intent.source, intent=result.intent.intent
            ).inc()
        except Exception:
            pass
    RECENT_ANALYSES.set(len(state.recent_analyses))


@router.post("/analyze")
async def analyze(payload: AnalyzeIn, backend: BackendAPI = Depends(get_backend)) -> dict:
    start = time.time()
    logger.info(f"Received {payload.source} input: {payload.text[:50]}...")

    result = await backend.analyze(payload.to_raw_input())
    _record([result])

    try:
        REQUESTS_TOTAL.labels(
            endpoint="/analyze", status="processed" if result.success else "failed"
        ).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint="/analyze").observe(time.time() - start)
    except Exception:
        pass

    return result.model_dump(mode="json")


@router.post("/analyze/batch")
async def analyze_batch(payload: AnalyzeBatchIn, backend: BackendAPI = Depends(get_backend)) -> dict:
    start = time.time()
    inputs = [item.to_raw_input() for item in payload.items]

    if payload.concurrent:
        results = await backend.analyze_concurrently(inputs)
    else:
        results = await backend.analyze_batch(inputs)
    _record(results)

    try:
        REQUESTS_TOTAL.labels(endpoint="/analyze/batch", status="processed").inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint="/analyze/batch").observe(time.time() - start)
    except Exception:
        pass

    return {
        "total": len(results),
        "failed": sum(1 for r in results if not r.success),
        "concurrent": payload.concurrent,
        "results": [r.model_dump(mode="json") for r in results],
    }


@router.get("/analyses")
async def recent_analyses(limit: int = 20) -> dict:
    items = list(state.recent_analyses)[: max(limit, 0)]
    return {"total": len(state.recent_analyses), "analyses": items}
