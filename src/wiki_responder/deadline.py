"""Wall-clock processing budget for response handlers.

Slack retries a delivery when it does not see a response in time, and the
hosting platform kills requests that outlive its own ceiling (180s on the
deployments this runs on). Handlers therefore race a timer: whichever
finishes first decides the outcome, and a handler that loses is cancelled.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum

from wiki_responder.config import get_settings

logger = logging.getLogger(__name__)

RETRY_NUM_HEADER = "X-Slack-Retry-Num"
RETRY_REASON_HEADER = "X-Slack-Retry-Reason"


class Outcome(str, Enum):
    """How a deadline-bound handler finished."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


def is_retry_request(headers: Mapping[str, str]) -> bool:
    """Return True when Slack marked the request as a redelivery.

    Starlette headers are case-insensitive; plain dicts are lowered here so
    either can be passed.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    retry_num = lowered.get(RETRY_NUM_HEADER.lower())
    if retry_num:
        logger.info(
            "Slack retry detected",
            extra={
                "retry_num": retry_num,
                "retry_reason": lowered.get(RETRY_REASON_HEADER.lower(), "unknown"),
            },
        )
        return True
    return False


def deadline_for(is_retry: bool) -> float:
    """Return the processing budget in seconds.

    Retries get the shorter budget: part of the caller's window has already
    been spent on the attempt that timed out.
    """
    settings = get_settings()
    if is_retry:
        return settings.retry_deadline_seconds
    return settings.original_deadline_seconds


async def run_with_deadline(
    handler: Callable[[], Awaitable[object]],
    timeout_seconds: float,
) -> Outcome:
    """Run ``handler()`` against a timer and report which finished first.

    On timeout the handler task is cancelled and the outcome is returned
    immediately, without waiting for the task to wind down. Handler
    exceptions are logged and reported as FAILED; they never propagate.
    """
    task = asyncio.ensure_future(handler())
    done, _ = await asyncio.wait({task}, timeout=timeout_seconds)

    if not done:
        task.cancel()
        logger.warning("Handler timed out after %.1fs", timeout_seconds)
        return Outcome.TIMED_OUT

    exc = task.exception()
    if exc is not None:
        logger.error("Handler failed: %s", exc, exc_info=exc)
        return Outcome.FAILED

    return Outcome.COMPLETED
