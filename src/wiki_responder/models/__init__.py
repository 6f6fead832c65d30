"""Data models for Slack events, conversation turns, and wiki lookups."""

from wiki_responder.models.slack import BotIdentity, ConversationTurn, EventKind, ThreadRef
from wiki_responder.models.wiki import WikiContent, WikiPage

__all__ = [
    "BotIdentity",
    "ConversationTurn",
    "EventKind",
    "ThreadRef",
    "WikiContent",
    "WikiPage",
]
