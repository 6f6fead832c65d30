"""Per-event status message and throttled progress reporting.

A ``StatusMessage`` belongs to exactly one event being processed. The first
update posts a reply in the thread; later updates edit that reply in place,
so progress never piles up as a stack of messages. Nothing is kept after the
event finishes.
"""

import logging
import time
from collections.abc import Awaitable, Callable

from slack_sdk.errors import SlackApiError

from wiki_responder.models.slack import ThreadRef
from wiki_responder.slack.client import get_slack_client

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], Awaitable[None]]


class StatusMessage:
    """An in-progress reply that is posted once and then updated in place."""

    def __init__(self, thread: ThreadRef) -> None:
        self.thread = thread
        self.ts: str | None = None

    async def update(self, text: str) -> None:
        """Post the status on first call, edit it afterwards. Empty text is ignored.

        Slack errors are logged and swallowed: a failed progress update must
        not abort the reply being generated.
        """
        if not text:
            return
        try:
            await self._write(text)
        except SlackApiError:
            logger.warning(
                "Failed to update status message in %s/%s",
                self.thread.channel_id,
                self.thread.thread_ts,
                exc_info=True,
            )

    async def finish(self, text: str, *, blocks: list[dict] | None = None) -> None:
        """Replace the status with the final reply text.

        Unlike ``update``, errors propagate so the caller can fall back to an
        apology.
        """
        await self._write(text, blocks=blocks)

    async def _write(self, text: str, *, blocks: list[dict] | None = None) -> None:
        client = await get_slack_client()
        extra = {"blocks": blocks} if blocks else {}
        if self.ts is None:
            response = await client.chat_postMessage(
                channel=self.thread.channel_id,
                thread_ts=self.thread.thread_ts,
                text=text,
                unfurl_links=False,
                **extra,
            )
            self.ts = response.get("ts")
            if not self.ts:
                raise RuntimeError("chat.postMessage returned no ts for status message")
        else:
            await client.chat_update(
                channel=self.thread.channel_id,
                ts=self.ts,
                text=text,
                **extra,
            )


class ProgressThrottle:
    """Drop progress reports that arrive within ``interval`` seconds of the last delivered one.

    The first report is always delivered.
    """

    def __init__(
        self,
        callback: ProgressCallback,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._callback = callback
        self._interval = interval
        self._clock = clock
        self._last: float | None = None

    async def __call__(self, text: str) -> None:
        now = self._clock()
        if self._last is not None and now - self._last < self._interval:
            return
        self._last = now
        await self._callback(text)


def mrkdwn_section(text: str) -> list[dict]:
    """Wrap ``text`` in a single mrkdwn section block."""
    return [{"type": "section", "text": {"type": "mrkdwn", "text": text}}]
