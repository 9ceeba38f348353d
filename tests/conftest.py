"""Shared fixtures for the webhook endpoint tests."""

from __future__ import annotations

import pytest

from app import app as flask_app

TOKEN = "gradingbot123securetokenverysecure"
ENDPOINT_URL = "https://example.com/hook"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test with no secrets configured."""
    monkeypatch.delenv("VERIFICATION_TOKEN", raising=False)
    monkeypatch.delenv("ENDPOINT_URL", raising=False)


@pytest.fixture
def configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VERIFICATION_TOKEN", TOKEN)
    monkeypatch.setenv("ENDPOINT_URL", ENDPOINT_URL)


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as test_client:
        yield test_client
