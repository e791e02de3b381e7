import json
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest
import requests

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from news2discord.models import Article  # noqa: E402


class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None, json_body=None):
        self.status_code = status_code
        self.headers = headers or {}
        self._json_body = json_body
        self.text = text if json_body is None else json.dumps(json_body)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json_body is None:
            raise ValueError("No JSON body")
        return self._json_body


class FakeSession:
    """Returns scripted responses in order; exceptions in the script are raised."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = []
        self.headers = {}

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)


class Sleeper:
    def __init__(self):
        self.waits = []

    def __call__(self, seconds):
        self.waits.append(seconds)


def day(d, month=1, year=2026, hour=0, minute=0):
    return datetime(year, month, d, hour, minute, tzinfo=UTC)


def article(slug, published, title=None):
    return Article(title=title or slug.title(), url=f"https://x/{slug}", published=published)


@pytest.fixture
def sleeper():
    return Sleeper()


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
