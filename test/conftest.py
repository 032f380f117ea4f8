from datetime import datetime

import pytest

from integration.permissions import StaticPermissionService
from momentum.config import ALL_PERMISSIONS

# Monday morning; relative dates in tests resolve against this.
FIXED_NOW = datetime(2026, 10, 19, 10, 0, 0)


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = []

    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        self.calls.append({"system": system, "user": user, "model": model})
        return self._response_text


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def granted_permissions():
    return StaticPermissionService(ALL_PERMISSIONS)


@pytest.fixture
def denied_permissions():
    return StaticPermissionService((), grant_on_request=False)
