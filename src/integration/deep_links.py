"""URL and deep-link construction for hand-off to payment, map and messaging apps."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)

PAYMENT_LINK_BASES: Dict[str, str] = {
    "kakao": "https://kakaopay.kakao.com/pay",
    "toss": "https://supertoss.co.kr/transfer",
    "naver": "https://n-pay.naver.com/transfer",
}

DEFAULT_RECEIVER = "받는 분"

# KRW base gift per social event type
BASE_GIFT_AMOUNTS: Dict[str, int] = {
    "wedding": 100000,
    "funeral": 50000,
    "first_birthday": 50000,
    "sixtieth_birthday": 100000,
    "birthday": 30000,
    "graduation": 50000,
    "etc": 50000,
}

RELATIONSHIP_MULTIPLIERS: Dict[str, float] = {
    "family": 1.5,
    "relative": 1.2,
    "friend": 1.0,
    "college_friend": 1.0,
    "high_school_friend": 1.0,
    "colleague": 1.2,
    "boss": 1.5,
    "neighbor": 0.8,
    "etc": 0.5,
}


def _format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def payment_link(provider: str, receiver: str, amount: float, message: str = "") -> str:
    provider = (provider or "").lower()
    base = PAYMENT_LINK_BASES.get(provider)
    if base is None:
        raise ValueError(f"Unknown payment provider: {provider!r}")

    receiver = receiver or DEFAULT_RECEIVER
    if provider == "kakao":
        params = {"receiver": receiver, "amount": _format_amount(amount), "message": message}
    else:
        params = {"amount": _format_amount(amount), "message": message, "receiverName": receiver}
    return f"{base}?{urlencode(params)}"


def payment_links(amount: float, message: str, receiver: str = DEFAULT_RECEIVER) -> Dict[str, str]:
    return {provider: payment_link(provider, receiver, amount, message) for provider in PAYMENT_LINK_BASES}


def recommended_amount(event_type: Optional[str], relationship: Optional[str] = None) -> int:
    """Suggested gift in KRW, rounded to the nearest 10,000."""
    base = BASE_GIFT_AMOUNTS.get(event_type or "etc", 50000)
    multiplier = RELATIONSHIP_MULTIPLIERS.get(relationship or "", 1.0)
    return int(round(base * multiplier / 10000)) * 10000


def map_url(
    destination: str,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    transport_mode: str = "driving",
) -> str:
    if latitude is not None and longitude is not None:
        return (
            "https://www.google.com/maps/dir/?api=1"
            f"&destination={latitude},{longitude}&travelmode={transport_mode or 'driving'}"
        )
    return f"https://www.google.com/maps/search/?api=1&query={quote(destination, safe='')}"


def communication_url(recipient: str, comm_type: str, message: Optional[str] = None) -> str:
    body = f"?body={quote(message, safe='')}" if message else ""
    if comm_type == "email":
        return f"mailto:{recipient}{body}"
    if comm_type == "sms":
        return f"sms:{recipient}{body}"
    if comm_type == "call":
        return f"tel:{recipient}"
    raise ValueError(f"Unsupported communication type: {comm_type}")


class DeepLinkLauncher(ABC):
    @abstractmethod
    async def can_open(self, url: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def open(self, url: str) -> None:
        raise NotImplementedError


class RecordingLauncher(DeepLinkLauncher):
    """Accepts URLs with a known scheme and remembers what was opened."""

    DEFAULT_SCHEMES = ("https", "http", "mailto", "sms", "tel")

    def __init__(self, schemes: Iterable[str] = DEFAULT_SCHEMES):
        self.schemes = {s.lower() for s in schemes}
        self.opened: List[str] = []

    async def can_open(self, url: str) -> bool:
        scheme, sep, _ = (url or "").partition(":")
        return bool(sep) and scheme.lower() in self.schemes

    async def open(self, url: str) -> None:
        if not await self.can_open(url):
            raise ValueError(f"Cannot open URL: {url}")
        self.opened.append(url)
        logger.info(f"Opened {url}")
