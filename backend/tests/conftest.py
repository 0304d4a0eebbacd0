import json
import sys
from pathlib import Path

import pytest


# Allow `from maisa_node...` imports when running tests from repo root.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

_NO_JSON = object()


class _FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", json_payload=_NO_JSON, content: bytes | None = None):
        self.status_code = status_code
        self.text = text
        self._json_payload = json_payload
        self.content = content if content is not None else text.encode("utf-8")

    def json(self):
        if self._json_payload is _NO_JSON:
            raise ValueError("not json")
        return self._json_payload


def json_response(payload, status_code: int = 200) -> _FakeResponse:
    return _FakeResponse(status_code, text=json.dumps(payload), json_payload=payload)


def text_response(text: str, status_code: int = 200) -> _FakeResponse:
    return _FakeResponse(status_code, text=text)


def bytes_response(data: bytes, status_code: int = 200) -> _FakeResponse:
    return _FakeResponse(status_code, text="", content=data)


class FakeWorkerApi:
    """Stands in for `httpx.request`; replays queued responses per (method, url).

    The last queued response for a route is repeated once the queue drains.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict]] = []
        self._routes: dict[tuple[str, str], list] = {}

    def add(self, method: str, url: str, *responses) -> None:
        self._routes.setdefault((method, url), []).extend(responses)

    def calls_to(self, method: str, url: str) -> list[dict]:
        return [kwargs for m, u, kwargs in self.calls if m == method and u == url]

    def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        queue = self._routes.get((method, url))
        if not queue:
            raise AssertionError(f"unexpected request {method} {url}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_api(monkeypatch):
    api = FakeWorkerApi()
    monkeypatch.setattr("maisa_node.services.transport.httpx.request", api)
    return api


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def responses():
    """Response builders for tests that script the fake API."""

    class _Builders:
        json = staticmethod(json_response)
        text = staticmethod(text_response)
        bytes = staticmethod(bytes_response)

    return _Builders
