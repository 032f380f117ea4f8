import json

import pytest

from llm.llm_client import LLMClient, build_provider

def test_llm_extra_text_around_json(fake_provider_factory):
    provider = fake_provider_factory(
        'Sure! Here is the result: {"scores": {"work": 0.8}} Thanks.'
    )
    client = LLMClient(provider=provider)
    out = client.complete("마감 보고서")
    assert json.loads(out) == {"scores": {"work": 0.8}}

def test_llm_braces_inside_strings(fake_provider_factory):
    provider = fake_provider_factory('note {"scores": {"work": 0.7}, "why": "a } b"}')
    client = LLMClient(provider=provider)
    assert json.loads(client.complete("x"))["why"] == "a } b"

def test_llm_invalid_json_fallback(fake_provider_factory):
    provider = fake_provider_factory("INVALID OUTPUT")
    client = LLMClient(provider=provider)
    assert client.complete("Anything") == "{}"
    assert client.score_intents("Anything", ["work", "other"]) == {}

def test_llm_wrong_shape_is_discarded(fake_provider_factory):
    provider = fake_provider_factory('{"scores": ["work"]}')
    client = LLMClient(provider=provider)
    assert client.score_intents("x", ["work"]) == {}

def test_unknown_provider_name():
    with pytest.raises(ValueError):
        build_provider("carrier-pigeon")

def test_mock_provider_scores_social_text():
    client = LLMClient(provider=build_provider("mock"))
    scores = client.score_intents("친구 결혼식 초청", ["calendar", "social", "other"])
    assert scores["social"] == 1.0
    assert scores["other"] == 0.0
