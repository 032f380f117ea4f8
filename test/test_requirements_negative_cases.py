import pytest
from pydantic import ValidationError

from classification.intent_classifier import IntentClassifier
from extraction.entity_extractor import EntityExtractor
from integration.calendar_integration import CalendarIntegration
from momentum.config import Settings
from momentum.models import PaymentAction, PersonEntity, RawInput


def test_payment_negative_amount():
    with pytest.raises(ValidationError):
        PaymentAction(title="Bad", recipient="x", amount=-5)


def test_action_priority_out_of_range():
    with pytest.raises(ValidationError):
        PaymentAction(title="Bad", recipient="x", amount=1, priority=9)


def test_raw_input_rejects_unknown_source():
    with pytest.raises(ValidationError):
        RawInput(text="x", source="telepathy")


def test_person_latitude_is_not_a_person_field():
    with pytest.raises(ValidationError):
        PersonEntity(raw_text="x", value="x", confidence=0.5, latitude=1.0)


def test_extractor_ignores_garbage(fixed_clock):
    assert EntityExtractor(clock=fixed_clock).extract("!!! ??? ...") == []


@pytest.mark.asyncio
async def test_classifier_handles_none():
    result = await IntentClassifier().classify(None)
    assert result.intent == "other"


@pytest.mark.asyncio
async def test_calendar_rejects_inverted_event():
    from datetime import datetime

    with pytest.raises(ValueError):
        await CalendarIntegration().create_event(
            "x", datetime(2026, 1, 1, 10), datetime(2026, 1, 1, 9)
        )


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("GRANTED_PERMISSIONS", "calendar, notification")
    monkeypatch.setenv("ACTION_TIMEOUT_S", "2.5")
    monkeypatch.setenv("INTENT_BACKEND", "OLLAMA")
    settings = Settings.from_env()
    assert settings.granted_permissions == frozenset({"CALENDAR", "NOTIFICATION"})
    assert settings.action_timeout_s == 2.5
    assert settings.intent_backend == "ollama"
