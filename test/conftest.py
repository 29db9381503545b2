import pytest
from fastapi.testclient import TestClient

from storage.record_store import InMemoryRecordStore


class FakeProvider:
    def __init__(self, response_text: str = "[]", error: Exception = None):
        self._response_text = response_text
        self._error = error
        self.calls = []

    def generate(self, *, system: str, user: str) -> str:
        self.calls.append({"system": system, "user": user})
        if self._error is not None:
            raise self._error
        return self._response_text


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str = "[]", error: Exception = None):
        return FakeProvider(response_text, error=error)
    return _make


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def client(store):
    from api import state
    from api.main import app

    state.init_state(store)
    return TestClient(app)
