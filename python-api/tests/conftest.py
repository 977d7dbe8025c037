"""
Pytest configuration for the search proxy tests.

The provider is never contacted: every outbound call goes through an
httpx.MockTransport that records the request and replays a queued answer.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

TOKEN = "test-token-5f3a9c"


class Upstream:
    """Fake provider. Queue answers in call order, inspect ``requests`` after."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._answers = []

    def respond(self, status: int = 200, json=None, text: str | None = None):
        if text is not None:
            self._answers.append(lambda req: httpx.Response(status, text=text))
        else:
            self._answers.append(lambda req: httpx.Response(status, json=json))
        return self

    def fail(self, exc_type: type[httpx.RequestError], message: str = "boom"):
        def _raise(req):
            raise exc_type(message, request=req)
        self._answers.append(_raise)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._answers:
            return httpx.Response(200, json={})
        return self._answers.pop(0)(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def token(monkeypatch):
    monkeypatch.setenv("TRAVELPAYOUTS_API_TOKEN", TOKEN)
    monkeypatch.delenv("TRAVELPAYOUTS_TOKEN", raising=False)
    return TOKEN


@pytest.fixture
def no_token(monkeypatch):
    monkeypatch.delenv("TRAVELPAYOUTS_API_TOKEN", raising=False)
    monkeypatch.delenv("TRAVELPAYOUTS_TOKEN", raising=False)


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def api(upstream):
    """Test client for the FastAPI app wired to the fake provider."""
    from main import app, get_http_client

    http_client = upstream.client()
    app.dependency_overrides[get_http_client] = lambda: http_client
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
