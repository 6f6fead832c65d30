"""Reply generation: conversation turns -> Slack-formatted answer via Gemini.

Runs a function-calling loop: each Gemini step may request wiki tools, whose
results are fed back until the model answers in text or the step budget is
spent. Gemini calls retry transient errors with tenacity.
"""

import logging
from collections.abc import Awaitable, Callable

from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from wiki_responder.config import get_settings
from wiki_responder.cost import TokenUsage, extract_usage, log_usage, merge_usage
from wiki_responder.models.slack import ConversationTurn
from wiki_responder.responder.client import get_gemini_client
from wiki_responder.responder.formatting import to_slack_mrkdwn
from wiki_responder.responder.prompts import build_system_prompt
from wiki_responder.responder.tools import WIKI_TOOL, run_tool

logger = logging.getLogger(__name__)

MAX_STEPS = 10
THINKING_STATUS = "Thinking..."

ProgressCallback = Callable[[str], Awaitable[None]]


def _is_retryable(error: BaseException) -> bool:
    """Determine if a Gemini API error is transient and worth retrying.

    Returns True for server errors (5xx) and rate limits (429).
    Returns False for permanent client errors (400, 401, 403).
    """
    if isinstance(error, ServerError):
        return True
    if isinstance(error, ClientError) and error.code == 429:
        return True
    return False


@retry(
    retry=retry_if_exception(_is_retryable),
    wait=wait_exponential_jitter(initial=1, max=30, jitter=2),
    stop=stop_after_attempt(4),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _call_gemini(
    client: genai.Client,
    model: str,
    contents: list[types.Content],
    config: types.GenerateContentConfig,
) -> types.GenerateContentResponse:
    """Call Gemini once, retrying on transient errors.

    Raises:
        ClientError: On permanent API errors (400, 401, 403).
        ServerError: After exhausting retries on server errors.
    """
    return await client.aio.models.generate_content(
        model=model,
        contents=contents,
        config=config,
    )


def build_contents(turns: list[ConversationTurn]) -> list[types.Content]:
    """Map conversation turns to Gemini contents (``assistant`` -> ``model``)."""
    return [
        types.Content(
            role="model" if turn.role == "assistant" else "user",
            parts=[types.Part.from_text(text=turn.content)],
        )
        for turn in turns
    ]


async def generate_response(
    turns: list[ConversationTurn],
    on_progress: ProgressCallback | None = None,
    client: genai.Client | None = None,
) -> str:
    """Generate a reply for the conversation, consulting the wiki as needed.

    Args:
        turns: Ordered conversation, oldest first.
        on_progress: Called with short status texts while the reply is being
            produced. Throttling is the caller's job.
        client: Gemini client. Defaults to the process-wide singleton.

    Returns:
        Reply text converted to Slack mrkdwn.
    """
    settings = get_settings()
    client = client or get_gemini_client()
    config = types.GenerateContentConfig(
        system_instruction=build_system_prompt(),
        tools=[WIKI_TOOL],
        temperature=0.3,
    )
    contents = build_contents(turns)
    usage = TokenUsage()

    if on_progress:
        await on_progress(THINKING_STATUS)

    for steps in range(1, MAX_STEPS + 1):
        response = await _call_gemini(client, settings.gemini_model, contents, config)
        usage = merge_usage(usage, extract_usage(response))

        calls = response.function_calls or []
        if not calls:
            break

        contents.append(response.candidates[0].content)
        parts = []
        for call in calls:
            result = await run_tool(call.name, call.args or {}, on_progress)
            parts.append(types.Part.from_function_response(name=call.name, response=result))
        contents.append(types.Content(role="user", parts=parts))
    else:
        logger.warning("Reached %d tool-calling steps without a final answer", MAX_STEPS)

    log_usage(settings.gemini_model, steps, usage)

    text = response.text or ""
    return to_slack_mrkdwn(text)
