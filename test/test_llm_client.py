from llm.llm_client import LLMClient

def test_score_intents(fake_provider_factory):
    provider = fake_provider_factory(
        '{"scores": {"social": 0.9, "calendar": 0.2, "other": 0.05}}'
    )
    client = LLMClient(provider=provider)
    scores = client.score_intents("결혼식 초대합니다", ["calendar", "social", "other"])
    assert scores["social"] == 0.9
    assert "Text: 결혼식 초대합니다" in provider.calls[0]["user"]

def test_score_intents_drops_unknown_labels_and_clamps(fake_provider_factory):
    provider = fake_provider_factory('{"scores": {"SOCIAL": 1.7, "weather": 0.8}}')
    client = LLMClient(provider=provider)
    scores = client.score_intents("x", ["social", "other"])
    assert scores == {"social": 1.0}

def test_model_tier_selects_model_name(fake_provider_factory, monkeypatch):
    monkeypatch.setenv("LLM_MODEL_SMALL", "tiny-model")
    provider = fake_provider_factory('{"scores": {}}')
    LLMClient(provider=provider, model_tier="small").complete("hi")
    assert provider.calls[0]["model"] == "tiny-model"
