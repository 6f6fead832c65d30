"""Terminal notifications posted when a handler cannot deliver its own reply.

All functions are fire-and-forget: they catch and log errors but never raise,
so a failed notification cannot turn into a non-200 response.
"""

import logging

from slack_sdk.errors import SlackApiError

from wiki_responder.models.slack import ThreadRef
from wiki_responder.slack.client import get_slack_client
from wiki_responder.slack.status import StatusMessage

logger = logging.getLogger(__name__)

APOLOGY_TEXT = (
    "Sorry, something went wrong while processing your request. "
    "Please try again in a little while."
)


async def notify_failure(thread: ThreadRef, status: StatusMessage | None = None) -> None:
    """Leave an apology in the thread after a timeout or handler error.

    Replaces the event's status message when one was posted, otherwise posts
    a new reply.

    Args:
        thread: The reply chain the event belongs to.
        status: The event's status message, if the handler created one.
    """
    try:
        if status is not None and status.ts is not None:
            await status.finish(APOLOGY_TEXT)
            return
        client = await get_slack_client()
        await client.chat_postMessage(
            channel=thread.channel_id,
            thread_ts=thread.thread_ts,
            text=APOLOGY_TEXT,
        )
    except SlackApiError:
        logger.error(
            "Failed to send apology to %s/%s",
            thread.channel_id,
            thread.thread_ts,
            exc_info=True,
        )
