"""Async Slack client singleton and the bot's own identity.

The identity comes from ``auth.test`` and is kept in a TTL cache so a token
rotation is picked up within the hour without a restart.
"""

import logging

from cachetools import TTLCache
from slack_sdk.web.async_client import AsyncWebClient

from wiki_responder.config import get_settings
from wiki_responder.models.slack import BotIdentity

logger = logging.getLogger(__name__)

_client: AsyncWebClient | None = None
_identity_cache: TTLCache = TTLCache(maxsize=1, ttl=3600)
_IDENTITY_KEY = "bot_identity"


async def get_slack_client() -> AsyncWebClient:
    """Return the shared AsyncWebClient, built from ``slack_bot_token`` on first use."""
    global _client
    if _client is None:
        _client = AsyncWebClient(token=get_settings().slack_bot_token)
    return _client


async def get_bot_identity() -> BotIdentity:
    """Return the bot's user id and bot id.

    Errors propagate: without an identity, self-authored events cannot be told
    apart from user events.

    Raises:
        SlackApiError: If auth.test fails.
        RuntimeError: If auth.test returns no user_id.
    """
    cached = _identity_cache.get(_IDENTITY_KEY)
    if cached is not None:
        return cached

    client = await get_slack_client()
    response = await client.auth_test()
    user_id = response.get("user_id")
    if not user_id:
        raise RuntimeError("auth.test returned no user_id for the bot token")

    identity = BotIdentity(user_id=user_id, bot_id=response.get("bot_id"))
    _identity_cache[_IDENTITY_KEY] = identity
    logger.info(
        "Resolved bot identity",
        extra={"bot_user_id": identity.user_id, "bot_id": identity.bot_id},
    )
    return identity


def reset_client() -> None:
    """Drop the client and the cached identity. Used for testing."""
    global _client
    _client = None
    _identity_cache.clear()
