"""Thread history: already-answered detection and conversation context building.

Both features read ``conversations.replies`` for the event's thread. Slack
returns replies oldest first starting at the thread root, so the two readers
ask for different windows: the already-answered check starts at the
triggering event, the context builder pages through to the newest messages.
The already-answered check looks for a bot message newer than the triggering
event, which survives a cold start that wiped the in-memory event cache.
"""

import logging
from collections import deque

from slack_sdk.errors import SlackApiError

from wiki_responder.config import get_settings
from wiki_responder.models.slack import BotIdentity, ConversationTurn
from wiki_responder.slack.client import get_bot_identity, get_slack_client

logger = logging.getLogger(__name__)

MISSING_SCOPE_REPLY = (
    "Sorry, I don't have permission to read the history of this channel. "
    "Please ask a workspace admin to add the groups:history scope to the app."
)


class ThreadAccessError(Exception):
    """History fetch rejected because the bot token lacks a required scope."""

    def __init__(self, needed: str | None = None, provided: str | None = None) -> None:
        self.needed = needed
        self.provided = provided
        super().__init__(f"missing_scope (needed: {needed}, provided: {provided})")


async def _replies(channel_id: str, thread_ts: str, **params) -> dict:
    client = await get_slack_client()
    try:
        return await client.conversations_replies(channel=channel_id, ts=thread_ts, **params)
    except SlackApiError as exc:
        error_code = exc.response.get("error", "") if exc.response else ""
        if error_code == "missing_scope":
            raise ThreadAccessError(
                exc.response.get("needed"), exc.response.get("provided")
            ) from exc
        raise


async def fetch_thread(
    channel_id: str,
    thread_ts: str,
    limit: int,
    oldest: str | None = None,
) -> list[dict]:
    """Return up to ``limit`` messages of the thread, oldest first.

    Without ``oldest`` the window starts at the thread root. With it, the
    window starts at that timestamp (inclusive).

    Raises:
        ThreadAccessError: If Slack rejects the call with ``missing_scope``.
        SlackApiError: On any other Slack API error.
    """
    params: dict = {"limit": limit}
    if oldest:
        params["oldest"] = oldest
        params["inclusive"] = True
    response = await _replies(channel_id, thread_ts, **params)
    return response.get("messages") or []


async def fetch_thread_tail(channel_id: str, thread_ts: str, limit: int) -> list[dict]:
    """Return the newest ``limit`` messages of the thread, oldest first.

    Follows ``response_metadata.next_cursor`` to the end of the thread.

    Raises:
        ThreadAccessError: If Slack rejects the call with ``missing_scope``.
        SlackApiError: On any other Slack API error.
    """
    tail: deque[dict] = deque(maxlen=limit)
    params: dict = {"limit": limit}
    while True:
        response = await _replies(channel_id, thread_ts, **params)
        tail.extend(response.get("messages") or [])
        cursor = (response.get("response_metadata") or {}).get("next_cursor")
        if not cursor:
            return list(tail)
        params["cursor"] = cursor


def _ts(value: str | None) -> float:
    return float(value) if value else 0.0


def strip_mention(text: str, bot_user_id: str) -> str:
    """Remove the first ``<@BOT> `` mention markup from user text."""
    return text.replace(f"<@{bot_user_id}> ", "", 1)


async def already_responded(event: dict) -> bool:
    """Return True if the bot has already replied in the event's thread after the event.

    Only messages from the event onwards are fetched, so a long thread cannot
    push the bot's reply out of the window.

    Fail-open: any error while fetching history or resolving the bot identity
    is logged and reported as "not answered", so a legitimate event is never
    dropped because of a lookup failure. The cost is a rare duplicate reply.
    """
    channel_id = event.get("channel")
    event_ts = event.get("ts")
    if not channel_id or not event_ts:
        logger.info("Event has no channel or ts, skipping history check")
        return False

    thread_ts = event.get("thread_ts") or event_ts
    settings = get_settings()

    try:
        messages = await fetch_thread(
            channel_id, thread_ts, settings.dedup_history_limit, oldest=event_ts
        )
        if len(messages) <= 1:
            return False

        identity = await get_bot_identity()
        replies = [
            m
            for m in messages
            if identity.bot_id
            and m.get("bot_id") == identity.bot_id
            and m.get("thread_ts") == thread_ts
            and _ts(m.get("ts")) > _ts(event_ts)
        ]
    except Exception:
        logger.warning(
            "History check failed for %s/%s, proceeding",
            channel_id,
            event_ts,
            exc_info=True,
        )
        return False

    if replies:
        logger.info(
            "Thread already answered",
            extra={"channel": channel_id, "event_ts": event_ts, "bot_replies": len(replies)},
        )
        return True
    return False


async def build_thread_context(
    channel_id: str, thread_ts: str, identity: BotIdentity
) -> list[ConversationTurn]:
    """Convert the newest part of a thread into conversation turns for the response generator.

    Bot messages become ``assistant`` turns, everything else ``user`` turns.
    The ``<@BOT> `` mention prefix is stripped from user text and messages
    without text are skipped.

    Degrades instead of raising: a missing history scope yields a single turn
    explaining the missing permission, any other Slack error a single turn
    describing the failure.
    """
    settings = get_settings()
    try:
        messages = await fetch_thread_tail(channel_id, thread_ts, settings.thread_history_limit)
    except ThreadAccessError as exc:
        logger.error(
            "Missing scope reading thread history",
            extra={"needed": exc.needed, "provided": exc.provided},
        )
        return [ConversationTurn(role="user", content=MISSING_SCOPE_REPLY)]
    except SlackApiError as exc:
        logger.error("Failed to fetch thread history: %s", exc, exc_info=True)
        return [ConversationTurn(role="user", content=f"An error occurred: {exc}")]

    turns: list[ConversationTurn] = []
    for message in messages:
        text = message.get("text")
        if not text:
            continue
        is_bot = bool(message.get("bot_id"))
        if not is_bot:
            text = strip_mention(text, identity.user_id)
        turns.append(ConversationTurn(role="assistant" if is_bot else "user", content=text))
    return turns
