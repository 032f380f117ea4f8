from urllib.parse import parse_qs, urlparse

import pytest

from integration.deep_links import (
    RecordingLauncher,
    communication_url,
    map_url,
    payment_link,
    payment_links,
    recommended_amount,
)


def test_kakao_link_parameters():
    url = payment_link("kakao", "김민수", 100000, "결혼 축하드립니다")
    parsed = urlparse(url)
    assert parsed.netloc == "kakaopay.kakao.com"
    params = parse_qs(parsed.query)
    assert params["receiver"] == ["김민수"]
    assert params["amount"] == ["100000"]


def test_all_providers():
    links = payment_links(50000, "축하")
    assert set(links) == {"kakao", "toss", "naver"}
    assert parse_qs(urlparse(links["naver"]).query)["receiverName"] == ["받는 분"]


def test_unknown_provider():
    with pytest.raises(ValueError):
        payment_link("paypal", "x", 1)


@pytest.mark.parametrize(
    "event_type,relationship,amount",
    [
        ("wedding", "friend", 100000),
        ("wedding", "family", 150000),
        ("funeral", "colleague", 60000),
        ("birthday", "neighbor", 20000),
        ("graduation", None, 50000),
        (None, None, 50000),
    ],
)
def test_recommended_amount(event_type, relationship, amount):
    assert recommended_amount(event_type, relationship) == amount


def test_map_url_prefers_coordinates():
    url = map_url("강남역", 37.49, 127.02, "walking")
    assert "destination=37.49,127.02" in url
    assert "travelmode=walking" in url
    assert map_url("강남역").startswith("https://www.google.com/maps/search/?api=1&query=")


def test_communication_urls():
    assert communication_url("a@b.com", "email", "hi there") == "mailto:a@b.com?body=hi%20there"
    assert communication_url("01012345678", "call") == "tel:01012345678"
    with pytest.raises(ValueError):
        communication_url("x", "chat")


@pytest.mark.asyncio
async def test_recording_launcher_checks_scheme():
    launcher = RecordingLauncher(schemes=["https"])
    assert await launcher.can_open("https://example.com")
    assert not await launcher.can_open("tel:123")
    with pytest.raises(ValueError):
        await launcher.open("tel:123")
    await launcher.open("https://example.com")
    assert launcher.opened == ["https://example.com"]
