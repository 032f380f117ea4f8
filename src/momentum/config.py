from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return float(raw)


ALL_PERMISSIONS = frozenset({"CALENDAR", "NOTIFICATION", "LOCATION"})


@dataclass(frozen=True)
class Settings:
    """Runtime knobs for the pipeline, read from the environment."""

    intent_backend: str = "keyword"
    intent_min_confidence: float = 0.6
    llm_tier: str = "large"
    urgent_notification_threshold: int = 4
    default_currency: str = "KRW"
    payment_provider: str = "kakao"
    granted_permissions: FrozenSet[str] = field(default_factory=lambda: ALL_PERMISSIONS)
    request_permissions_on_demand: bool = True
    action_retry_attempts: int = 0
    action_retry_delay_s: float = 0.5
    action_timeout_s: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Settings":
        granted_raw = os.getenv("GRANTED_PERMISSIONS", "").strip()
        if granted_raw:
            granted = frozenset(
                p.strip().upper() for p in granted_raw.split(",") if p.strip()
            )
        else:
            granted = ALL_PERMISSIONS

        return cls(
            intent_backend=os.getenv("INTENT_BACKEND", "keyword").strip().lower(),
            intent_min_confidence=float(os.getenv("INTENT_MIN_CONFIDENCE", "0.6")),
            llm_tier=os.getenv("LLM_TIER", "large").strip(),
            urgent_notification_threshold=int(
                os.getenv("URGENT_NOTIFICATION_THRESHOLD", "4")
            ),
            default_currency=os.getenv("DEFAULT_CURRENCY", "KRW").strip().upper(),
            payment_provider=os.getenv("PAYMENT_PROVIDER", "kakao").strip().lower(),
            granted_permissions=granted,
            request_permissions_on_demand=_env_bool(
                "REQUEST_PERMISSIONS_ON_DEMAND", "true"
            ),
            action_retry_attempts=int(os.getenv("ACTION_RETRY_ATTEMPTS", "0")),
            action_retry_delay_s=float(os.getenv("ACTION_RETRY_DELAY_S", "0.5")),
            action_timeout_s=_env_float("ACTION_TIMEOUT_S", None),
        )
