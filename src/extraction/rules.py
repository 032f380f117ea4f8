"""
Rule tables for entity extraction.

Every rule is plain data (name, compiled pattern, entity type, confidence) so a
rule can be exercised on its own and new rules can be added without touching
the extractor's dispatch code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class PatternRule:
    name: str
    pattern: re.Pattern
    entity_type: str
    confidence: float
    # numeral rules: value multiplier; relative date rules: day offset
    factor: int = 1
    minimum: Optional[int] = None
    currency: str = "KRW"

    def finditer(self, text: str):
        return self.pattern.finditer(text)


# ---------------------------------------------------------------- dates

ABSOLUTE_DATE_RULES: List[PatternRule] = [
    PatternRule(
        "iso_date",
        re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)"),
        "date",
        0.95,
    ),
    PatternRule(
        "month_day",
        re.compile(r"(?<!\d)(\d{1,2})\s*월\s*(\d{1,2})\s*일"),
        "date",
        0.9,
    ),
    # factor = month offset from the current month
    PatternRule(
        "next_month_day",
        re.compile(r"다음\s*달\s*(\d{1,2})\s*일"),
        "date",
        0.9,
        factor=1,
    ),
    PatternRule(
        "this_month_day",
        re.compile(r"이번\s*달\s*(\d{1,2})\s*일"),
        "date",
        0.9,
        factor=0,
    ),
]

RELATIVE_DATE_RULES: List[PatternRule] = [
    PatternRule(
        "day_after_tomorrow",
        re.compile(r"모레|day after tomorrow", re.IGNORECASE),
        "date",
        0.85,
        factor=2,
    ),
    PatternRule(
        "tomorrow",
        re.compile(r"내일(?!\s*모레)|(?<!after )tomorrow", re.IGNORECASE),
        "date",
        0.85,
        factor=1,
    ),
    PatternRule(
        "next_week",
        re.compile(r"다음\s*주|next week", re.IGNORECASE),
        "date",
        0.85,
        factor=7,
    ),
]

TIME_OF_DAY_RULES: List[PatternRule] = [
    PatternRule(
        "korean_meridiem",
        re.compile(r"(오전|오후)\s*(\d{1,2})\s*시(?:\s*(\d{1,2})\s*분)?"),
        "time",
        0.85,
    ),
    PatternRule(
        "english_meridiem",
        re.compile(r"(?<!\d)(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE),
        "time",
        0.85,
    ),
]

PM_MARKERS = {"오후", "pm"}


# ---------------------------------------------------------------- amounts

AMOUNT_RULES: List[PatternRule] = [
    PatternRule(
        "man_won",
        re.compile(r"(?<![\d,])(\d+)\s*만\s*원"),
        "amount",
        0.9,
        factor=10_000,
    ),
    PatternRule(
        "cheon_won",
        re.compile(r"(?<![\d,])(\d+)\s*천\s*원"),
        "amount",
        0.9,
        factor=1_000,
    ),
    PatternRule(
        "comma_won",
        re.compile(r"(?<![\d,])(\d{1,3}(?:,\d{3})+)\s*원"),
        "amount",
        0.9,
    ),
    PatternRule(
        "plain_won",
        re.compile(r"(?<![\d,])(\d{4,})\s*원"),
        "amount",
        0.9,
        minimum=1_001,
    ),
    PatternRule(
        "usd",
        re.compile(r"\$\s?(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"),
        "amount",
        0.9,
        currency="USD",
    ),
]

NATIVE_DIGITS: Dict[str, int] = {
    "일": 1,
    "이": 2,
    "삼": 3,
    "사": 4,
    "오": 5,
    "육": 6,
    "칠": 7,
    "팔": 8,
    "구": 9,
}

NATIVE_UNITS: Dict[str, int] = {"십": 10, "백": 100, "천": 1_000}

NATIVE_MYRIAD = 10_000

# whole sino-Korean numeral before 만, e.g. 오만, 십만, 오십만, 이십오만, 천만
NATIVE_MAGNITUDE_RULE = PatternRule(
    "native_magnitude",
    re.compile(
        r"(?=[일이삼사오육칠팔구십백천])"
        r"((?:[이삼사오육칠팔구]?천)?(?:[이삼사오육칠팔구]?백)?"
        r"(?:[이삼사오육칠팔구]?십)?[일이삼사오육칠팔구]?)만\s*원"
    ),
    "amount",
    0.85,
)


# ---------------------------------------------------------------- contacts

PHONE_RULE = PatternRule(
    "mobile_phone",
    re.compile(r"(?<!\d)01[016789]-?\d{3,4}-?\d{4}(?!\d)"),
    "person",
    0.85,
)

EMAIL_RULE = PatternRule(
    "email",
    re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    "person",
    0.95,
)


# ---------------------------------------------------------------- locations

LOCATION_KEYWORDS: List[str] = [
    # venues
    "장례식장",
    "예식장",
    "웨딩홀",
    "호텔",
    "병원",
    "식당",
    "카페",
    "교회",
    "성당",
    "빌딩",
    "센터",
    "공항",
    # places
    "서울",
    "부산",
    "강남",
    "홍대",
    "신촌",
    "신사",
    "삼성",
    "gangnam",
    "hongdae",
]

LOCATION_CONFIDENCE = 0.7


# ---------------------------------------------------------------- names

NAME_SUFFIXES: List[str] = ["박사님", "교수님", "선생님", "님", "씨", "교수", "박사", "선생"]

HONORIFIC_NAME_RULE = PatternRule(
    "honorific_name",
    re.compile(r"([가-힣]{2,4}?)\s?(박사님|교수님|선생님|님|씨)"),
    "person",
    0.75,
)

NAME_PARTICLES = "은는이가을를의에와과도"

COMMON_SURNAMES = (
    "김이박최정강조윤장임한오서신권황안송류전홍고문양손배백허유남심노하곽성차주우구민진나지엄채원천방공현함변염여추도소석선설마길연위표명기반왕금옥육인맹제모"
)

# standalone three-syllable word starting with a common surname,
# optionally followed by one particle
SURNAME_NAME_RULE = PatternRule(
    "surname_name",
    re.compile(
        r"(?<![가-힣])([" + COMMON_SURNAMES + r"][가-힣]{2})"
        r"(?:[" + NAME_PARTICLES + r"])?(?![가-힣])"
    ),
    "person",
    0.6,
)

NAME_STOPWORDS = {
    "결혼식",
    "장례식",
    "돌잔치",
    "생신",
    "생일",
    "파티",
    "축하",
    "초대",
    "예약",
    "부모",
    "어머",
    "아버",
    "고객",
    "선생",
    "교수",
    "박사",
    "여러분",
    "회의실",
    "보고서",
    "제안서",
    "프로젝트",
    "장바구니",
    "이번주",
    "다음주",
    "오늘",
    "내일",
    "모레",
    "주말",
    "가족",
    "친구",
    "동료",
    "상사",
    "친척",
    "이웃",
    # common words and pronouns that start with a surname syllable
    "우리",
    "이번",
    "이제",
    "마감",
    "정말",
    "정도",
    "지금",
    "지난",
    "진짜",
    "문제",
    "문자",
    "전화",
    "조금",
    "주문",
    "구매",
    "송금",
    "선물",
    "일정",
    "회의",
    "할인",
    "가격",
    "배송",
    "모두",
    "방금",
    "오전",
    "오후",
    "이거",
    "이것",
}


# ---------------------------------------------------------------- relationships

# longest keyword first so "대학 친구" wins over "친구"
RELATIONSHIP_KEYWORDS: List[Tuple[str, str]] = [
    ("고등학교 친구", "high_school_friend"),
    ("대학 친구", "college_friend"),
    ("college friend", "college_friend"),
    ("회사 동료", "colleague"),
    ("직장 동료", "colleague"),
    ("coworker", "colleague"),
    ("colleague", "colleague"),
    ("친구", "friend"),
    ("friend", "friend"),
    ("동료", "colleague"),
    ("상사", "boss"),
    ("boss", "boss"),
    ("가족", "family"),
    ("family", "family"),
    ("친척", "relative"),
    ("relative", "relative"),
    ("이웃", "neighbor"),
    ("neighbor", "neighbor"),
]

RELATIONSHIP_CONFIDENCE = 0.8
