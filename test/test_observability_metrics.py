import importlib

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from api.backend import BackendAPI


def _import_app():
    # Import lazily so environment variables (if any) can be set before import.
    mod = importlib.import_module("api.main")
    return mod


def _client_with_backend(mod, fixed_clock):
    deps = importlib.import_module("api.dependencies")
    backend = BackendAPI(clock=fixed_clock)
    mod.app.dependency_overrides[deps.get_backend] = lambda: backend
    return TestClient(mod.app)


def test_metrics_endpoint_exposes_prometheus_text() -> None:
    mod = _import_app()
    client = TestClient(mod.app)

    r = client.get("/metrics")
    assert r.status_code == 200
    # Prometheus text exposition format content-type
    assert "text/plain" in r.headers.get("content-type", "")
    body = r.text
    # Key metric names should appear
    assert "momentum_request_latency_seconds" in body
    assert "momentum_recent_analyses" in body


def test_analyze_increments_counters(fixed_clock) -> None:
    mod = _import_app()
    client = _client_with_backend(mod, fixed_clock)
    try:
        r = client.post("/analyze", json={"text": "결혼식 초대합니다"})
        assert r.status_code == 200

        m = client.get("/metrics")
        assert m.status_code == 200
        lines = m.text.splitlines()

        # We avoid parsing because Prometheus text parsers can be fragile across environments.
        assert any(
            line.startswith('momentum_requests_total{endpoint="/analyze",status="processed"}')
            for line in lines
        )
        assert REGISTRY.get_sample_value(
            "momentum_intent_source_total", {"source": "fallback", "intent": "social"}
        ) >= 1
        assert any(line.startswith('momentum_analyses_total{status="success"}') for line in lines)
    finally:
        mod.app.dependency_overrides.clear()


def test_execute_counts_by_category_and_outcome(fixed_clock) -> None:
    mod = _import_app()
    client = _client_with_backend(mod, fixed_clock)
    try:
        action = {
            "category": "calendar",
            "title": "날짜 없음",
            "start_time": "2026-10-20T15:00:00",
            "end_time": "2026-10-20T16:00:00",
        }
        r = client.post("/actions/execute", json={"action": action})
        assert r.status_code == 200
        assert r.json()["result"]["success"] is False

        assert client.get("/metrics").status_code == 200
        assert REGISTRY.get_sample_value(
            "momentum_actions_executed_total", {"category": "calendar", "outcome": "failed"}
        ) >= 1
    finally:
        mod.app.dependency_overrides.clear()


def test_metrics_recent_analyses_matches_endpoint() -> None:
    mod = _import_app()
    client = TestClient(mod.app)

    a = client.get("/analyses")
    assert a.status_code == 200
    total = a.json()["total"]

    m = client.get("/metrics")
    depth = None
    for line in m.text.splitlines():
        if line.startswith("momentum_recent_analyses "):
            depth = line.split(" ", 1)[1].strip()
            break

    assert depth is not None, "momentum_recent_analyses metric not found"
    assert int(float(depth)) == int(total)


def test_health_reports_intent_backend() -> None:
    mod = _import_app()
    client = TestClient(mod.app)
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] in {"healthy", "degraded"}
    assert "intent_backend" in body
