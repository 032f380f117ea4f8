from __future__ import annotations
import json
from llm.providers.base import LLMProvider

# Rough per-label vocabulary used to fake model scores offline.
_MOCK_VOCABULARY = {
    "social": ["결혼식", "초청", "생신", "장례", "모임", "wedding", "party", "funeral",
               "graduation", "ceremony", "축의", "축하", "돌잔치"],
    "shopping": ["구매", "쇼핑", "쇼핑몰", "할인", "세일", "가격", "쿠폰", "물건"],
    "work": ["보고", "제안서", "리포트", "데드라인", "마감", "프로젝트", "업무", "태스크"],
    "calendar": ["미팅", "회의", "일정", "약속", "스케줄", "예약"],
    "payment": ["송금", "이체", "결제", "입금", "계좌"],
}


class MockProvider(LLMProvider):
    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        """
        Returns dummy JSON responses based on the prompt content.
        """
        if "Score the intent" in user:
            text = user.split("Text:", 1)[-1].lower()
            scores = {label: 0.0 for label in _MOCK_VOCABULARY}
            for label, words in _MOCK_VOCABULARY.items():
                for word in words:
                    if word in text:
                        scores[label] += 0.2

            # normalize so the best label scores 1.0, like a softmax-ish head
            top = max(scores.values())
            if top > 0:
                scores = {k: round(v / top, 4) for k, v in scores.items()}
            scores["other"] = 0.0 if top > 0 else 0.5
            return json.dumps({"scores": scores})

        # Default fallback
        return "{}"
