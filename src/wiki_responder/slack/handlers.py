"""Slack event classification, duplicate suppression, and handler dispatch.

Slack delivers events at least once and retries when a response is slow.
``EventRouter`` turns that into effectively-at-most-once handling:

1. The delivery id is checked against the in-process ``RecentEventCache``
   (local, no network).
2. Mentions and direct messages are checked against the thread history for a
   bot reply newer than the event (network, fail-open).
3. Only when both pass is a handler started, raced against a deadline that is
   shorter for Slack retries.

Timeouts and handler errors leave an apology in the thread. Nothing raised
inside ``dispatch`` escapes it.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from wiki_responder.config import get_settings
from wiki_responder.deadline import Outcome, deadline_for, is_retry_request, run_with_deadline
from wiki_responder.dedup import RecentEventCache
from wiki_responder.models.slack import BotIdentity, ConversationTurn, EventKind, ThreadRef
from wiki_responder.responder import generate_response
from wiki_responder.slack.client import get_bot_identity, get_slack_client
from wiki_responder.slack.history import already_responded, build_thread_context, strip_mention
from wiki_responder.slack.notifier import notify_failure
from wiki_responder.slack.status import ProgressThrottle, StatusMessage, mrkdwn_section

logger = logging.getLogger(__name__)

WORKING_STATUS = "Working on it..."
THINKING_STATUS = "is thinking..."
EMPTY_REPLY = "Sorry, I couldn't come up with an answer."
GREETING_TEXT = "Hello, I'm an AI assistant that answers questions from the Backlog wiki!"
SUGGESTED_PROMPTS = [
    {"title": "Club fees", "message": "How much are the club fees and when are they due?"},
    {"title": "Upcoming events", "message": "What events are scheduled for this month?"},
]

# Dispatch results, reported back in the HTTP response body.
PROCESSED = "processed"
ALREADY_PROCESSED = "already_processed"
ALREADY_RESPONDED = "already_responded"
IGNORED = "ignored"
ERROR = "error"


@dataclass
class EventContext:
    """Everything one event's handler needs, passed explicitly down the call chain."""

    event: dict
    kind: EventKind
    identity: BotIdentity
    thread: ThreadRef | None
    status: StatusMessage | None = field(default=None)


def is_self_authored(event: dict, identity: BotIdentity) -> bool:
    """Return True for messages posted by a bot, including this one."""
    return bool(
        event.get("bot_id")
        or event.get("bot_profile")
        or (identity.bot_id and event.get("bot_id") == identity.bot_id)
        or event.get("user") == identity.user_id
    )


def classify(event: dict, identity: BotIdentity) -> EventKind:
    """Classify an event into one of the handled shapes, or OTHER.

    Mentions and direct messages authored by a bot classify as OTHER so the
    bot never answers itself.
    """
    event_type = event.get("type")

    if event_type == "app_mention":
        if is_self_authored(event, identity):
            return EventKind.OTHER
        return EventKind.MENTION

    if event_type == "assistant_thread_started":
        return EventKind.ASSISTANT_THREAD_STARTED

    if (
        event_type == "message"
        and not event.get("subtype")
        and event.get("channel_type") == "im"
        and not is_self_authored(event, identity)
    ):
        return EventKind.DIRECT_MESSAGE

    return EventKind.OTHER


def thread_for(event: dict, kind: EventKind) -> ThreadRef | None:
    """Return the reply chain the bot should answer in, if the event has one."""
    if kind == EventKind.ASSISTANT_THREAD_STARTED:
        assistant_thread = event.get("assistant_thread") or {}
        if assistant_thread.get("channel_id") and assistant_thread.get("thread_ts"):
            return ThreadRef(
                channel_id=assistant_thread["channel_id"],
                thread_ts=assistant_thread["thread_ts"],
            )
        return None
    if event.get("channel") and event.get("ts"):
        return ThreadRef.from_event(event)
    return None


async def _conversation(ctx: EventContext) -> list[ConversationTurn]:
    """Thread history when the event is a reply, otherwise the event text alone."""
    event = ctx.event
    if event.get("thread_ts"):
        return await build_thread_context(
            ctx.thread.channel_id, event["thread_ts"], ctx.identity
        )
    text = strip_mention(event.get("text", ""), ctx.identity.user_id)
    return [ConversationTurn(role="user", content=text)]


async def handle_mention(ctx: EventContext) -> None:
    """Answer an @mention by editing the event's status message into the reply."""
    settings = get_settings()
    progress = ProgressThrottle(ctx.status.update, settings.progress_interval_seconds)

    turns = await _conversation(ctx)
    reply = await generate_response(turns, progress)

    await ctx.status.finish(reply or EMPTY_REPLY)
    logger.info("Mention answered", extra={"channel": ctx.thread.channel_id})


async def handle_direct_message(ctx: EventContext) -> None:
    """Answer a direct message in its thread, rendering the reply as an mrkdwn block."""
    settings = get_settings()
    await ctx.status.update(THINKING_STATUS)
    progress = ProgressThrottle(ctx.status.update, settings.progress_interval_seconds)

    turns = await _conversation(ctx)
    reply = await generate_response(turns, progress) or EMPTY_REPLY

    await ctx.status.finish(reply, blocks=mrkdwn_section(reply))
    logger.info("Direct message answered", extra={"channel": ctx.thread.channel_id})


async def handle_assistant_thread_started(ctx: EventContext) -> None:
    """Greet a new assistant thread and offer suggested prompts."""
    client = await get_slack_client()
    await client.chat_postMessage(
        channel=ctx.thread.channel_id,
        thread_ts=ctx.thread.thread_ts,
        text=GREETING_TEXT,
    )
    await client.assistant_threads_setSuggestedPrompts(
        channel_id=ctx.thread.channel_id,
        thread_ts=ctx.thread.thread_ts,
        prompts=SUGGESTED_PROMPTS,
    )


Handler = Callable[[EventContext], Awaitable[None]]

HANDLERS: dict[EventKind, Handler] = {
    EventKind.MENTION: handle_mention,
    EventKind.DIRECT_MESSAGE: handle_direct_message,
    EventKind.ASSISTANT_THREAD_STARTED: handle_assistant_thread_started,
}

# Kinds whose thread must be checked for an existing bot reply before handling.
HISTORY_CHECKED = {EventKind.MENTION, EventKind.DIRECT_MESSAGE}


class EventRouter:
    """Routes ``event_callback`` envelopes to handlers behind both dedup layers.

    Owns the process-wide ``RecentEventCache``. Construct once at startup;
    the cache is not persisted and not shared between instances.
    """

    def __init__(
        self,
        cache: RecentEventCache,
        handlers: Mapping[EventKind, Handler] | None = None,
    ) -> None:
        self.cache = cache
        self.handlers = dict(handlers if handlers is not None else HANDLERS)

    async def dispatch(self, payload: dict, headers: Mapping[str, str]) -> str:
        """Process one ``event_callback`` payload and return the dispatch result.

        Never raises: unexpected errors are logged and reported as ``"error"``.
        Such errors come from the steps before a handler starts (identity lookup,
        classification, the first status post), so the id is released from the
        cache and a Slack retry of the same event gets another try.
        """
        event_id = payload.get("event_id")
        event = payload.get("event") or {}

        if event_id and self.cache.seen(event_id):
            logger.info("Event %s already processed, skipping", event_id)
            return ALREADY_PROCESSED

        try:
            return await self._route(event_id, event, headers)
        except Exception:
            logger.error("Event %s failed before a handler ran", event_id, exc_info=True)
            if event_id:
                self.cache.forget(event_id)
            return ERROR

    async def _route(self, event_id: str | None, event: dict, headers: Mapping[str, str]) -> str:
        identity = await get_bot_identity()
        kind = classify(event, identity)
        handler = self.handlers.get(kind)
        thread = thread_for(event, kind)

        if handler is None or thread is None:
            logger.debug("Ignoring event %s (%s)", event_id, event.get("type"))
            return IGNORED

        if kind in HISTORY_CHECKED and await already_responded(event):
            return ALREADY_RESPONDED

        timeout_seconds = deadline_for(is_retry_request(headers))
        ctx = EventContext(event=event, kind=kind, identity=identity, thread=thread)
        if kind in HISTORY_CHECKED:
            ctx.status = StatusMessage(thread)
        if kind == EventKind.MENTION:
            await ctx.status.update(WORKING_STATUS)

        logger.info(
            "Dispatching %s",
            kind.value,
            extra={"event_id": event_id, "deadline_seconds": timeout_seconds},
        )
        outcome = await run_with_deadline(lambda: handler(ctx), timeout_seconds)

        if outcome != Outcome.COMPLETED:
            await notify_failure(thread, ctx.status)
            return outcome.value
        return PROCESSED
