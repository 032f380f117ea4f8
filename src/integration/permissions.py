from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Platform permission names -> the coarse kind the permission service grants.
PERMISSION_KINDS: Dict[str, str] = {
    "READ_CALENDAR": "CALENDAR",
    "WRITE_CALENDAR": "CALENDAR",
    "POST_NOTIFICATIONS": "NOTIFICATION",
    "VIBRATE": "NOTIFICATION",
    "WAKE_LOCK": "NOTIFICATION",
    "ACCESS_FINE_LOCATION": "LOCATION",
    "ACCESS_COARSE_LOCATION": "LOCATION",
}

PERMISSION_RATIONALES: Dict[str, str] = {
    "CALENDAR": "Calendar access is needed to add events and reminders found in your notes.",
    "NOTIFICATION": "Notification access is needed to remind you of important actions on time.",
    "LOCATION": "Location access is needed to open directions to places found in your notes.",
}


def kinds_for(permissions: Iterable[str]) -> List[str]:
    """Distinct permission kinds for platform permission names, in first-seen order."""
    kinds: List[str] = []
    for name in permissions:
        kind = PERMISSION_KINDS.get(name, name)
        if kind not in kinds:
            kinds.append(kind)
    return kinds


@dataclass(frozen=True)
class PermissionResult:
    granted: bool
    status: str = "granted"
    can_open_settings: bool = False


class PermissionService(ABC):
    @abstractmethod
    async def check_permission(self, kind: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def request_permission(self, kind: str, show_rationale: bool = True) -> PermissionResult:
        raise NotImplementedError


class StaticPermissionService(PermissionService):
    """In-process permission state.

    `granted` is what is already allowed. When `grant_on_request` is set, a
    request for any other kind is accepted and remembered; otherwise it is
    denied and the caller is pointed at settings.
    """

    def __init__(self, granted: Iterable[str] = (), grant_on_request: bool = True):
        self._granted = {k.upper() for k in granted}
        self.grant_on_request = grant_on_request
        self.requests: List[Tuple[str, bool]] = []

    @property
    def granted(self) -> FrozenSet[str]:
        return frozenset(self._granted)

    async def check_permission(self, kind: str) -> bool:
        return kind.upper() in self._granted

    async def request_permission(self, kind: str, show_rationale: bool = True) -> PermissionResult:
        kind = kind.upper()
        self.requests.append((kind, show_rationale))
        if kind in self._granted:
            return PermissionResult(granted=True)

        if show_rationale:
            rationale: Optional[str] = PERMISSION_RATIONALES.get(kind)
            if rationale:
                logger.info(f"Requesting {kind} permission: {rationale}")

        if self.grant_on_request:
            self._granted.add(kind)
            return PermissionResult(granted=True)

        logger.warning(f"{kind} permission denied")
        return PermissionResult(granted=False, status="blocked", can_open_settings=True)

    def revoke(self, kind: str) -> None:
        self._granted.discard(kind.upper())
