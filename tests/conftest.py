"""Shared fixtures: scripted HTTP sessions and a sleep recorder."""

import json as jsonlib

import pytest
import requests

from bouquetai.transport import RetryTransport
from bouquetai.types import BouquetConfig


def make_response(status: int, json=None, text: str | None = None, url: str = "") -> requests.Response:
    """Build a real `requests.Response` with a JSON or plain-text body."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    if json is not None:
        response._content = jsonlib.dumps(json).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
        response.headers["Content-Type"] = "text/html"
    response.encoding = "utf-8"
    return response


class FakeSession:
    """Returns (or raises) scripted outcomes in order and records every call."""

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers or {}})
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {method} {url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def sleeps(monkeypatch):
    """Record sleep durations instead of waiting."""
    recorded = []
    monkeypatch.setattr("time.sleep", lambda seconds: recorded.append(seconds))
    return recorded


@pytest.fixture
def make_transport(sleeps):
    def _make(outcomes, **kwargs):
        session = FakeSession(outcomes)
        kwargs.setdefault("retry_delay", 2.0)
        kwargs.setdefault("max_attempts", 3)
        return RetryTransport(session=session, **kwargs), session

    return _make


@pytest.fixture
def openai_bouquet():
    return BouquetConfig(
        occasion="Birthday",
        recipient="Mom",
        flowers=["rose", "lily"],
        selected_model="gpt-4",
        image_model="dall-e-2",
        openai_key="sk-test",
    )


@pytest.fixture
def yandex_bouquet():
    return BouquetConfig(
        occasion="Wedding",
        recipient="Anna",
        flowers=["peony", "eucalyptus", "rose"],
        selected_model="yandexgpt-pro",
        yandex_key="ya-key",
        yandex_folder_id="b1gfolder",
    )
