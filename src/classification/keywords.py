from __future__ import annotations

from typing import Dict, List

# Table order is the tie-break order: the first label with the top score wins.
INTENT_KEYWORDS: Dict[str, List[str]] = {
    "calendar": [
        "meeting",
        "appointment",
        "schedule",
        "calendar",
        "event",
        "일정",
        "약속",
        "미팅",
        "회의",
        "언제",
        "시간",
    ],
    "shopping": [
        "buy",
        "purchase",
        "shop",
        "shopping",
        "price",
        "sale",
        "discount",
        "cart",
        "구매",
        "쇼핑",
        "가격",
        "할인",
        "세일",
        "쿠폰",
        "장바구니",
    ],
    "work": [
        "deadline",
        "task",
        "project",
        "report",
        "work",
        "업무",
        "제안",
        "보고서",
        "마감",
        "제출",
        "프로젝트",
    ],
    "social": [
        "wedding",
        "birthday",
        "party",
        "funeral",
        "celebration",
        "invitation",
        "결혼",
        "결혼식",
        "생일",
        "파티",
        "경조사",
        "축하",
        "초대",
        "장례",
        "돌잔치",
        "환갑",
        "졸업",
    ],
    "payment": [
        "send",
        "transfer",
        "pay",
        "송금",
        "이체",
        "결제",
        "입금",
        "계좌",
    ],
}

INTENT_LABELS: List[str] = list(INTENT_KEYWORDS) + ["other"]

SOCIAL_EVENT_KEYWORDS: Dict[str, List[str]] = {
    "wedding": [
        "결혼", "wedding", "marriage", "예식", "웨딩",
        "신랑", "신부", "피로연", "예식장", "웨딩홀", "결혼식",
    ],
    "funeral": [
        "장례", "funeral", "장례식", "빈소", "상가", "발인",
        "별세", "소천", "부고", "조문", "임종",
    ],
    "first_birthday": ["돌잔치", "첫생일", "first birthday", "돌선물"],
    "sixtieth_birthday": ["환갑", "회갑", "칠순", "팔순", "회갑연", "60th birthday"],
    "birthday": ["생일", "birthday", "생신", "파티", "party"],
    "graduation": ["졸업", "graduation", "졸업식", "학위"],
}


def keyword_hits(text: str, table: Dict[str, List[str]]) -> Dict[str, int]:
    lowered = (text or "").lower()
    return {
        label: sum(1 for keyword in keywords if keyword.lower() in lowered)
        for label, keywords in table.items()
    }


def winner_confidence(hits: int) -> float:
    if hits <= 0:
        return 0.3
    return round(min(0.5 + hits * 0.1, 0.95), 4)


def alternative_confidence(hits: int) -> float:
    return round(min(0.3 + hits * 0.1, 0.8), 4)


def social_event_type(text: str) -> str:
    hits = keyword_hits(text, SOCIAL_EVENT_KEYWORDS)
    best, best_hits = "etc", 0
    for event_type, count in hits.items():
        if count > best_hits:
            best, best_hits = event_type, count
    return best
