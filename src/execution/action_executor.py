from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

from execution.errors import ActionExecutionError, DispatchError, PermissionDeniedError
from execution.handlers import ActionHandlers
from integration.permissions import PermissionService, StaticPermissionService, kinds_for
from momentum.config import Settings
from momentum.models import ActionResult, ExecutionStatus

logger = logging.getLogger(__name__)

REQUIRED_PERMISSIONS: Dict[str, List[str]] = {
    "calendar": ["READ_CALENDAR", "WRITE_CALENDAR"],
    "notification": ["POST_NOTIFICATIONS", "VIBRATE", "WAKE_LOCK"],
    "navigation": ["ACCESS_FINE_LOCATION", "ACCESS_COARSE_LOCATION"],
}

# Fields each category needs before dispatch, checked by prepare().
REQUIRED_DATA: Dict[str, List[str]] = {
    "calendar": ["date"],
    "payment": ["amount"],
    "task": ["deadline"],
    "communication": ["person"],
}

STAGE_PROGRESS = {"preparing": 0, "executing": 50, "verifying": 90, "completed": 100, "failed": 0}

ProgressCallback = Callable[[ExecutionStatus], None]


@dataclass(frozen=True)
class ExecutionOptions:
    retry_attempts: int = 0
    retry_delay_s: float = 0.5
    timeout_s: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExecutionOptions":
        return cls(
            retry_attempts=settings.action_retry_attempts,
            retry_delay_s=settings.action_retry_delay_s,
            timeout_s=settings.action_timeout_s,
        )


@dataclass(frozen=True)
class PreparationReport:
    ready: bool
    missing_data: List[str]


class ActionCancelled(Exception):
    pass


class ActionExecutor:
    """Drives an action through preparing -> executing -> verifying -> completed.

    Every failure mode (validation, missing permission, handler error,
    timeout, cancellation) ends in a failed ActionResult; execute() never
    raises. Status for each action id is kept in memory and can be polled
    with get_status().
    """

    def __init__(
        self,
        permissions: Optional[PermissionService] = None,
        handlers: Optional[ActionHandlers] = None,
        options: Optional[ExecutionOptions] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.permissions = permissions or StaticPermissionService()
        self.handlers = handlers or ActionHandlers()
        self.options = options or ExecutionOptions()
        self.clock = clock
        self._statuses: Dict[str, ExecutionStatus] = {}
        self._in_flight: Set[str] = set()
        self._cancelled: Set[str] = set()

    # ------------------------------------------------------------ execution

    async def execute(
        self,
        action,
        options: Optional[ExecutionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ActionResult:
        options = options or self.options
        action_id = action.id
        category = getattr(action, "category", None)

        if action.status not in {"pending", "ready"}:
            return ActionResult(
                action_id=action_id,
                success=False,
                error=f"Action is already {action.status}",
                metadata={"category": category},
            )

        self._in_flight.add(action_id)
        self._cancelled.discard(action_id)
        self._update(action_id, "preparing", on_progress)
        try:
            errors = self.validate(action)
            if errors:
                raise DispatchError(", ".join(errors))

            report = self.prepare(action)
            if report.missing_data:
                logger.info(f"Action {action_id} is missing {', '.join(report.missing_data)}")

            await self._ensure_permissions(category)
            self._raise_if_cancelled(action_id)

            action.advance_status("ready")
            self._update(action_id, "executing", on_progress)
            data, attempts = await self._dispatch(action, options)
            self._raise_if_cancelled(action_id)

            self._update(action_id, "verifying", on_progress)
            action.advance_status("executed")
            action.executed_at = self.clock()
            self._update(action_id, "completed", on_progress)
            return ActionResult(
                action_id=action_id,
                success=True,
                data=data,
                timestamp=self.clock(),
                metadata={
                    "category": category,
                    "attempts": attempts,
                    "missing_data": report.missing_data,
                },
            )
        except ActionCancelled:
            logger.info(f"Action {action_id} cancelled")
            action.advance_status("cancelled")
            return self._failure(action, "cancelled", on_progress, cancelled=True)
        except asyncio.TimeoutError:
            message = f"Action timed out after {options.timeout_s}s"
            logger.warning(f"Action {action_id} ({category}) {message.lower()}")
            return self._fail(action, message, on_progress)
        except ActionExecutionError as e:
            logger.warning(f"Action {action_id} ({category}) failed: {e}")
            return self._fail(action, str(e), on_progress)
        except Exception as e:
            logger.exception(f"Action {action_id} ({category}) raised unexpectedly")
            return self._fail(action, str(e) or type(e).__name__, on_progress)
        finally:
            self._in_flight.discard(action_id)
            self._cancelled.discard(action_id)

    async def execute_batch(
        self,
        actions,
        options: Optional[ExecutionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ActionResult]:
        actions = list(actions)
        results: List[ActionResult] = []
        for i, action in enumerate(actions, start=1):
            results.append(await self.execute(action, options, on_progress))
            if on_progress is not None:
                on_progress(
                    ExecutionStatus(
                        action_id="batch",
                        stage="completed" if i == len(actions) else "executing",
                        progress=round(i / len(actions) * 100),
                        message=f"Completed {i}/{len(actions)} actions",
                    )
                )
        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Batch finished: {succeeded}/{len(results)} actions succeeded")
        return results

    async def _dispatch(self, action, options: ExecutionOptions):
        attempts = 0
        while True:
            attempts += 1
            try:
                data = await asyncio.wait_for(self.handlers.dispatch(action), timeout=options.timeout_s)
                return data, attempts
            except Exception as e:
                if action.id in self._cancelled:
                    raise ActionCancelled(action.id) from e
                if isinstance(e, DispatchError) or attempts > options.retry_attempts:
                    raise
                logger.warning(
                    f"Action {action.id} attempt {attempts} failed ({e or type(e).__name__}); retrying"
                )
                await asyncio.sleep(options.retry_delay_s)

    # ------------------------------------------------------------ phases

    def validate(self, action) -> List[str]:
        errors: List[str] = []
        if not getattr(action, "id", None) or not str(action.id).strip():
            errors.append("Action ID is required")
        if not getattr(action, "title", None) or not str(action.title).strip():
            errors.append("Action title is required")

        entities = getattr(action, "entities", None)
        if entities is None:
            return errors
        if not isinstance(entities, list):
            errors.append("Entities must be a list")
            return errors
        for i, entity in enumerate(entities):
            confidence = getattr(entity, "confidence", None)
            if confidence is None or not 0.0 <= confidence <= 1.0:
                errors.append(f"Entity {i} confidence out of range")
            if not getattr(entity, "value", None):
                errors.append(f"Entity {i} has no value")
        return errors

    def prepare(self, action) -> PreparationReport:
        """Report what a category still needs. Never fails."""
        missing: List[str] = []
        entity_types = {e.type for e in getattr(action, "entities", None) or []}
        for need in REQUIRED_DATA.get(getattr(action, "category", None), []):
            if need in entity_types:
                continue
            if need == "deadline" and getattr(action, "deadline", None) is not None:
                continue
            missing.append(need)
        return PreparationReport(ready=not missing, missing_data=missing)

    async def _ensure_permissions(self, category: Optional[str]) -> None:
        for kind in kinds_for(self.required_permissions(category)):
            if await self.permissions.check_permission(kind):
                continue
            result = await self.permissions.request_permission(kind, show_rationale=True)
            if not result.granted:
                raise PermissionDeniedError(kind, category)

    # ------------------------------------------------------------ status

    def _update(
        self,
        action_id: str,
        stage: str,
        on_progress: Optional[ProgressCallback] = None,
        message: Optional[str] = None,
    ) -> ExecutionStatus:
        status = ExecutionStatus(
            action_id=action_id, stage=stage, progress=STAGE_PROGRESS[stage], message=message
        )
        self._statuses[action_id] = status
        if on_progress is not None:
            on_progress(status)
        return status

    def _raise_if_cancelled(self, action_id: str) -> None:
        if action_id in self._cancelled:
            raise ActionCancelled(action_id)

    def _fail(self, action, message: str, on_progress: Optional[ProgressCallback]) -> ActionResult:
        if action.status in {"pending", "ready"}:
            action.advance_status("failed")
        action.error = message
        return self._failure(action, message, on_progress)

    def _failure(
        self,
        action,
        message: str,
        on_progress: Optional[ProgressCallback],
        cancelled: bool = False,
    ) -> ActionResult:
        self._update(action.id, "failed", on_progress, message=message)
        metadata: Dict[str, Any] = {"category": getattr(action, "category", None)}
        if cancelled:
            metadata["cancelled"] = True
        return ActionResult(
            action_id=action.id,
            success=False,
            error=message,
            timestamp=self.clock(),
            metadata=metadata,
        )

    def get_status(self, action_id: str) -> Optional[ExecutionStatus]:
        return self._statuses.get(action_id)

    def cancel(self, action_id: str) -> bool:
        """Flag an in-flight action; returns False when nothing was running."""
        if action_id not in self._in_flight:
            return False
        self._in_flight.discard(action_id)
        self._cancelled.add(action_id)
        return True

    def is_executing(self, action_id: str) -> bool:
        return action_id in self._in_flight

    # ------------------------------------------------------------ capabilities

    def can_execute(self, category: str) -> bool:
        return self.handlers.supports(category)

    def required_permissions(self, category: Optional[str]) -> List[str]:
        return list(REQUIRED_PERMISSIONS.get(category, []))

    async def request_permissions(self, category: str) -> bool:
        try:
            for kind in kinds_for(self.required_permissions(category)):
                result = await self.permissions.request_permission(kind, show_rationale=True)
                if not result.granted:
                    return False
            return True
        except Exception as e:
            logger.warning(f"Permission request for {category} failed: {e}")
            return False

    def cleanup(self) -> None:
        self._statuses.clear()
        self._in_flight.clear()
        self._cancelled.clear()
