"""Slack ingress: webhook handling, signature verification, dedup, and replies."""

from wiki_responder.slack.client import get_bot_identity, get_slack_client, reset_client
from wiki_responder.slack.handlers import EventRouter
from wiki_responder.slack.router import router

__all__ = [
    "EventRouter",
    "get_bot_identity",
    "get_slack_client",
    "reset_client",
    "router",
]
