"""Tests for Slack client singleton and cached bot identity."""

from unittest.mock import AsyncMock, patch

import pytest
from slack_sdk.web.async_client import AsyncWebClient

from wiki_responder.models.slack import BotIdentity
from wiki_responder.slack.client import get_bot_identity, get_slack_client, reset_client


async def test_get_slack_client_creates_client():
    """get_slack_client returns an AsyncWebClient initialised from settings."""
    client = await get_slack_client()

    assert isinstance(client, AsyncWebClient)
    assert client.token == "xoxb-test"


async def test_get_slack_client_returns_cached():
    """Second call returns the same object (singleton)."""
    first = await get_slack_client()
    second = await get_slack_client()

    assert first is second


async def test_reset_client_clears_cache():
    """After reset_client(), a new instance is created."""
    first = await get_slack_client()
    reset_client()
    second = await get_slack_client()

    assert first is not second


@pytest.fixture()
def mock_client():
    """Patch get_slack_client to return an AsyncMock Slack client."""
    client = AsyncMock()
    with patch("wiki_responder.slack.client.get_slack_client", new_callable=AsyncMock) as m:
        m.return_value = client
        yield client


async def test_get_bot_identity_from_auth_test(mock_client: AsyncMock):
    mock_client.auth_test.return_value = {"user_id": "UBOT", "bot_id": "BBOT"}

    identity = await get_bot_identity()

    assert identity == BotIdentity(user_id="UBOT", bot_id="BBOT")


async def test_get_bot_identity_is_cached(mock_client: AsyncMock):
    mock_client.auth_test.return_value = {"user_id": "UBOT", "bot_id": "BBOT"}

    await get_bot_identity()
    await get_bot_identity()

    mock_client.auth_test.assert_awaited_once()


async def test_get_bot_identity_without_user_id_raises(mock_client: AsyncMock):
    """No identity is fatal: self-authored events could not be recognised."""
    mock_client.auth_test.return_value = {"ok": True}

    with pytest.raises(RuntimeError):
        await get_bot_identity()


async def test_reset_client_clears_identity(mock_client: AsyncMock):
    mock_client.auth_test.return_value = {"user_id": "UBOT", "bot_id": None}

    await get_bot_identity()
    reset_client()
    await get_bot_identity()

    assert mock_client.auth_test.await_count == 2
