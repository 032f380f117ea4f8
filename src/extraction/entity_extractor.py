from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from extraction import rules
from momentum.models import (
    AmountEntity,
    DateEntity,
    Entity,
    LocationEntity,
    PersonEntity,
    TimeEntity,
)

logger = logging.getLogger(__name__)

Span = Tuple[int, int]


def _overlaps(span: Span, taken: List[Span]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in taken)


def _add_months(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


class EntityExtractor:
    """Rule-based extraction of dates, amounts, contacts, places, names and
    relationship labels from free text.

    The clock is injectable so relative expressions ("내일", "next week") are
    reproducible in tests.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock

    def extract(self, text: Optional[str]) -> List[Entity]:
        if not text or not text.strip():
            return []

        entities: List[Entity] = []
        entities.extend(self.extract_dates(text))
        entities.extend(self.extract_amounts(text))
        entities.extend(self.extract_contacts(text))
        entities.extend(self.extract_locations(text))
        entities.extend(self.extract_names(text))
        entities.extend(self.extract_relationships(text))

        logger.debug(f"Extracted {len(entities)} entities from text ({len(text)} chars)")
        return entities

    def extract_many(self, texts: Iterable[Optional[str]]) -> List[List[Entity]]:
        return [self.extract(t) for t in texts]

    # ------------------------------------------------------------ dates

    def extract_dates(self, text: str) -> List[Entity]:
        today = self.clock().date()
        found: List[Tuple[date, str, float]] = []

        for rule in rules.ABSOLUTE_DATE_RULES:
            for match in rule.finditer(text):
                parsed = self._resolve_absolute(rule, match.groups(), today)
                if parsed is None:
                    logger.debug(f"Skipping invalid date '{match.group(0)}'")
                    continue
                found.append((parsed, match.group(0), rule.confidence))

        for rule in rules.RELATIVE_DATE_RULES:
            match = rule.pattern.search(text)
            if match:
                found.append(
                    (today + timedelta(days=rule.factor), match.group(0), rule.confidence)
                )

        entities: List[Entity] = [
            DateEntity(raw_text=raw, value=d.isoformat(), confidence=conf)
            for d, raw, conf in found
        ]

        time_of_day = self._find_time_of_day(text)
        if time_of_day is None:
            return entities

        (hour, minute), raw_time, confidence = time_of_day
        if entities:
            # attaches to the most recently extracted date
            last = entities[-1]
            day = date.fromisoformat(last.value)
            stamp = datetime(day.year, day.month, day.day, hour, minute)
            entities[-1] = DateEntity(
                raw_text=f"{last.raw_text} {raw_time}",
                value=stamp.isoformat(),
                confidence=last.confidence,
                metadata={"time_of_day": f"{hour:02d}:{minute:02d}"},
            )
        else:
            entities.append(
                TimeEntity(
                    raw_text=raw_time,
                    value=f"{hour:02d}:{minute:02d}:00",
                    confidence=confidence,
                )
            )
        return entities

    def _resolve_absolute(self, rule, groups, today: date) -> Optional[date]:
        try:
            if rule.name == "iso_date":
                year, month, day = (int(g) for g in groups)
                return date(year, month, day)
            if rule.name == "month_day":
                month, day = (int(g) for g in groups)
                return date(today.year, month, day)
            # next_month_day / this_month_day
            year, month = _add_months(today.year, today.month, rule.factor)
            return date(year, month, int(groups[0]))
        except ValueError:
            return None

    def _find_time_of_day(self, text: str):
        for rule in rules.TIME_OF_DAY_RULES:
            match = rule.pattern.search(text)
            if not match:
                continue
            if rule.name == "korean_meridiem":
                marker, hour_s, minute_s = match.groups()
            else:
                hour_s, minute_s, marker = match.groups()
            hour = int(hour_s)
            minute = int(minute_s) if minute_s else 0
            if hour > 12 or minute > 59:
                continue
            if marker.lower() in rules.PM_MARKERS and hour < 12:
                hour += 12
            elif marker.lower() not in rules.PM_MARKERS and hour == 12:
                hour = 0
            return (hour, minute), match.group(0), rule.confidence
        return None

    # ------------------------------------------------------------ amounts

    def extract_amounts(self, text: str) -> List[Entity]:
        taken: List[Span] = []
        entities: List[Entity] = []

        for rule in rules.AMOUNT_RULES:
            for match in rule.finditer(text):
                if _overlaps(match.span(), taken):
                    continue
                number = float(match.group(1).replace(",", "")) * rule.factor
                if rule.minimum is not None and number < rule.minimum:
                    continue
                taken.append(match.span())
                entities.append(
                    AmountEntity(
                        raw_text=match.group(0),
                        value=_format_number(number),
                        confidence=rule.confidence,
                        currency=rule.currency,
                        metadata={"currency": rule.currency, "rule": rule.name},
                    )
                )

        native = rules.NATIVE_MAGNITUDE_RULE
        for match in native.finditer(text):
            if _overlaps(match.span(), taken):
                continue
            taken.append(match.span())
            entities.append(
                AmountEntity(
                    raw_text=match.group(0),
                    value=str(_native_number(match.group(1))),
                    confidence=native.confidence,
                    currency=native.currency,
                    metadata={"currency": native.currency, "rule": native.name},
                )
            )
        return entities

    # ------------------------------------------------------------ contacts

    def extract_contacts(self, text: str) -> List[Entity]:
        entities: List[Entity] = []

        seen_phones = set()
        for match in rules.PHONE_RULE.finditer(text):
            phone = match.group(0)
            key = phone.replace("-", "")
            if key in seen_phones:
                continue
            seen_phones.add(key)
            entities.append(
                PersonEntity(
                    raw_text=phone,
                    value=phone,
                    phone=phone,
                    confidence=rules.PHONE_RULE.confidence,
                    metadata={"kind": "phone"},
                )
            )

        seen_emails = set()
        for match in rules.EMAIL_RULE.finditer(text):
            email = match.group(0)
            if email.lower() in seen_emails:
                continue
            seen_emails.add(email.lower())
            entities.append(
                PersonEntity(
                    raw_text=email,
                    value=email,
                    email=email,
                    confidence=rules.EMAIL_RULE.confidence,
                    metadata={"kind": "email"},
                )
            )
        return entities

    # ------------------------------------------------------------ locations

    def extract_locations(self, text: str) -> List[Entity]:
        lowered = text.lower()
        entities: List[Entity] = []
        for keyword in rules.LOCATION_KEYWORDS:
            if keyword.lower() in lowered:
                entities.append(
                    LocationEntity(
                        raw_text=keyword,
                        value=keyword,
                        confidence=rules.LOCATION_CONFIDENCE,
                    )
                )
        return entities

    # ------------------------------------------------------------ names

    def extract_names(self, text: str) -> List[Entity]:
        entities: List[Entity] = []
        seen = set()
        taken: List[Span] = []

        for rule in (rules.HONORIFIC_NAME_RULE, rules.SURNAME_NAME_RULE):
            for match in rule.finditer(text):
                if _overlaps(match.span(1), taken):
                    continue
                name = _strip_suffixes(match.group(1))
                if len(name) < 2 or _is_common_word(name) or name in seen:
                    continue
                seen.add(name)
                taken.append(match.span(1))
                entities.append(
                    PersonEntity(
                        raw_text=match.group(0),
                        value=name,
                        confidence=rule.confidence,
                        metadata={"kind": "name"},
                    )
                )
        return entities

    # ------------------------------------------------------------ relationships

    def extract_relationships(self, text: str) -> List[Entity]:
        lowered = text.lower()
        taken: List[Span] = []
        entities: List[Entity] = []
        labels = set()

        for keyword, label in rules.RELATIONSHIP_KEYWORDS:
            start = lowered.find(keyword.lower())
            while start != -1:
                span = (start, start + len(keyword))
                if not _overlaps(span, taken):
                    taken.append(span)
                    if label not in labels:
                        labels.add(label)
                        entities.append(
                            PersonEntity(
                                raw_text=text[span[0]:span[1]],
                                value=label,
                                relationship=label,
                                confidence=rules.RELATIONSHIP_CONFIDENCE,
                                metadata={"kind": "relationship"},
                            )
                        )
                start = lowered.find(keyword.lower(), span[1])
        return entities


def _strip_suffixes(name: str) -> str:
    for suffix in rules.NAME_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def _format_number(number: float) -> str:
    if number == int(number):
        return str(int(number))
    return f"{number:.2f}"


def _native_number(numeral: str) -> int:
    """Numeral before 만 to won: 오십 -> 500000, 이십오 -> 250000, 천 -> 10000000."""
    total = 0
    digit = 0
    for char in numeral:
        if char in rules.NATIVE_UNITS:
            total += (digit or 1) * rules.NATIVE_UNITS[char]
            digit = 0
        else:
            digit = rules.NATIVE_DIGITS[char]
    return (total + digit) * rules.NATIVE_MYRIAD


def _is_common_word(name: str) -> bool:
    if name in rules.NAME_STOPWORDS:
        return True
    return name[-1] in rules.NAME_PARTICLES and name[:-1] in rules.NAME_STOPWORDS
