import base64
import json

import httpx
import pytest

from smb_invoicing.api import ApiClient


def make_token(payload: dict) -> str:
    """Build an unsigned JWT-like token carrying ``payload``."""

    def _segment(data: dict) -> str:
        raw = json.dumps(data).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    signature = base64.urlsafe_b64encode(b"signature").decode("ascii").rstrip("=")
    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(payload)}.{signature}"


class FakeApi:
    """
    In-memory stand-in for the REST API, served through httpx.MockTransport.

    ``routes`` maps (method, path) to either a JSON-serializable body or an
    int HTTP status to fail with. Every request is recorded in ``calls``.
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error": "not found"})
        body = self.routes[key]
        if isinstance(body, int):
            return httpx.Response(body, json={"error": "failure"})
        return httpx.Response(200, json=body)

    def client(self, token=None) -> ApiClient:
        return ApiClient(
            "http://api.test",
            token=token,
            transport=httpx.MockTransport(self.handler),
        )

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.calls if r.method == method and r.url.path == path]


@pytest.fixture
def fake_api():
    """Factory fixture: ``fake_api(routes)`` returns a FakeApi."""
    return FakeApi
