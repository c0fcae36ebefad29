"""Shared fixtures for the Rakshak test suite."""

import os
from typing import Optional

import pytest

from rakshak.errors import NotificationFailed, ReasoningClientError
from rakshak.models.reading import Reading
from rakshak.providers.base import ReasoningClient
from rakshak.tools.twilio_client import NotificationGateway


class FakeReasoningClient(ReasoningClient):
    """Returns a canned response, or raises the given exception."""

    name = "fake"

    def __init__(self, response: str = "", error: Optional[BaseException] = None):
        super().__init__(timeout=1.0)
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def classify(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeGateway(NotificationGateway):
    """Records sends; fails every send when `fail` is set."""

    def __init__(self, fail: bool = False, error: Optional[Exception] = None):
        self.fail = fail
        self.error = error
        self.sent: list[tuple[str, str]] = []

    async def send(self, message: str, destination: str) -> None:
        self.sent.append((message, destination))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise NotificationFailed("gateway rejected message")


@pytest.fixture
def make_reading():
    def _make(impact=0.0, speed=0.0, tilt=0.0, location="Home") -> Reading:
        return Reading(impact=impact, speed=speed, tilt=tilt, location=location)
    return _make


@pytest.fixture
def unavailable_client():
    return FakeReasoningClient(error=ReasoningClientError("connection refused"))


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no Rakshak-related environment and no .env file."""
    prefixes = (
        "REASONING_", "GEMINI_", "OLLAMA_", "TWILIO_", "RATE_LIMIT_",
        "VALIDATION_", "API_", "ENVIRONMENT", "EMERGENCY_CONTACT", "PORT",
    )
    for key in list(os.environ):
        if key.upper().startswith(prefixes):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def make_client():
    def _make(response: str = "", error: Optional[BaseException] = None) -> FakeReasoningClient:
        return FakeReasoningClient(response=response, error=error)
    return _make


@pytest.fixture
def make_gateway():
    def _make(fail: bool = False, error: Optional[Exception] = None) -> FakeGateway:
        return FakeGateway(fail=fail, error=error)
    return _make
