"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from wiki_responder.app import app
from wiki_responder.config import get_settings
from wiki_responder.responder.client import reset_client as reset_gemini_client
from wiki_responder.slack.client import reset_client as reset_slack_client

TEST_SIGNING_SECRET = "test_signing_secret_1234"


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch):
    """Point settings at test credentials and clear the settings cache around each test."""
    monkeypatch.setenv("SLACK_SIGNING_SECRET", TEST_SIGNING_SECRET)
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-test")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("BACKLOG_SPACE_ID", "example")
    monkeypatch.setenv("BACKLOG_API_KEY", "backlog-key")
    monkeypatch.setenv("BACKLOG_PROJECT_ID", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Ensure clean client and identity caches for every test."""
    reset_slack_client()
    reset_gemini_client()
    yield
    reset_slack_client()
    reset_gemini_client()


@pytest.fixture
def client():
    """TestClient with the lifespan run, so each test gets a fresh event router."""
    with TestClient(app) as test_client:
        yield test_client
