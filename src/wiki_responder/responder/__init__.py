"""Reply generation: Gemini with Backlog wiki tools.

Public API:
    generate_response(turns, on_progress) -> str
        Turns a conversation into a Slack mrkdwn reply, calling wiki
        tools as the model requests them.
"""

from wiki_responder.responder.client import get_gemini_client, reset_client
from wiki_responder.responder.generator import generate_response
from wiki_responder.responder.wiki import WikiError

__all__ = [
    "get_gemini_client",
    "reset_client",
    "generate_response",
    "WikiError",
]
