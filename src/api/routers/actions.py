import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.backend import BackendAPI
from api.dependencies import get_backend
from api.metrics import ACTIONS_EXECUTED_TOTAL, REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from execution.action_executor import ExecutionOptions
from momentum.models import Action, ActionResult

router = APIRouter()
logger = logging.getLogger(__name__)


class OptionsIn(BaseModel):
    retry_attempts: Optional[int] = Field(default=None, ge=0, le=5)
    retry_delay_s: Optional[float] = Field(default=None, ge=0)
    timeout_s: Optional[float] = Field(default=None, gt=0)

    def merged(self, base: ExecutionOptions) -> ExecutionOptions:
        return ExecutionOptions(
            retry_attempts=base.retry_attempts if self.retry_attempts is None else self.retry_attempts,
            retry_delay_s=base.retry_delay_s if self.retry_delay_s is None else self.retry_delay_s,
            timeout_s=base.timeout_s if self.timeout_s is None else self.timeout_s,
        )


class ExecuteIn(BaseModel):
    action: Action
    options: OptionsIn = Field(default_factory=OptionsIn)


class ExecuteBatchIn(BaseModel):
    actions: List[Action] = Field(default_factory=list)
    options: OptionsIn = Field(default_factory=OptionsIn)


def _count(category: str, result: ActionResult) -> None:
    try:
        ACTIONS_EXECUTED_TOTAL.labels(
            category=category, outcome="success" if result.success else "failed"
        ).inc()
    except Exception:
        pass


@router.post("/actions/execute")
async def execute_action(payload: ExecuteIn, backend: BackendAPI = Depends(get_backend)) -> dict:
    start = time.time()
    action = payload.action
    options = payload.options.merged(backend.executor.options)

    result = await backend.execute(action, options)
    _count(action.category, result)

    try:
        REQUESTS_TOTAL.labels(
            endpoint="/actions/execute", status="success" if result.success else "failed"
        ).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint="/actions/execute").observe(time.time() - start)
    except Exception:
        pass

    return {"result": result.model_dump(mode="json"), "action": action.model_dump(mode="json")}


@router.post("/actions/execute-batch")
async def execute_batch(payload: ExecuteBatchIn, backend: BackendAPI = Depends(get_backend)) -> dict:
    start = time.time()
    options = payload.options.merged(backend.executor.options)
    progress: List[dict] = []

    results = await backend.execute_batch(
        payload.actions,
        options,
        on_progress=lambda s: progress.append(s.model_dump()) if s.action_id == "batch" else None,
    )
    for action, result in zip(payload.actions, results):
        _count(action.category, result)

    try:
        REQUESTS_TOTAL.labels(endpoint="/actions/execute-batch", status="processed").inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint="/actions/execute-batch").observe(
            time.time() - start
        )
    except Exception:
        pass

    return {
        "total": len(results),
        "succeeded": sum(1 for r in results if r.success),
        "results": [r.model_dump(mode="json") for r in results],
        "progress": progress[-1] if progress else None,
    }


@router.get("/actions/{action_id}/status")
async def action_status(action_id: str, backend: BackendAPI = Depends(get_backend)) -> dict:
    status = backend.executor.get_status(action_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Unknown action id")
    return status.model_dump()


@router.delete("/actions/{action_id}")
async def cancel_action(action_id: str, backend: BackendAPI = Depends(get_backend)) -> dict:
    executor = backend.executor
    if executor.get_status(action_id) is None and not executor.is_executing(action_id):
        raise HTTPException(status_code=404, detail="Unknown action id")
    cancelled = executor.cancel(action_id)
    logger.info(f"Cancel requested for action {action_id} (in flight: {cancelled})")
    return {"action_id": action_id, "cancelled": cancelled}
