"""Slack-side models: thread references, bot identity, conversation turns, event kinds."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class EventKind(str, Enum):
    """Logical classification of an inbound Slack event."""

    MENTION = "app_mention"
    ASSISTANT_THREAD_STARTED = "assistant_thread_started"
    DIRECT_MESSAGE = "direct_message"
    OTHER = "other"


class ThreadRef(BaseModel):
    """A reply chain: channel plus the timestamp of the thread's root message."""

    channel_id: str
    thread_ts: str  # Slack message ts, e.g., "1234567890.123456"

    @classmethod
    def from_event(cls, event: dict) -> "ThreadRef":
        """Anchor on the event's thread, or on the event itself when it starts one."""
        return cls(
            channel_id=event["channel"],
            thread_ts=event.get("thread_ts") or event["ts"],
        )


class BotIdentity(BaseModel):
    """The bot's own identifiers as reported by auth.test."""

    user_id: str  # U... id used in <@mention> markup and as event author
    bot_id: str | None = None  # B... id stamped on messages the bot posts


class ConversationTurn(BaseModel):
    """One (role, content) pair handed to the response generator."""

    role: Literal["user", "assistant"]
    content: str
