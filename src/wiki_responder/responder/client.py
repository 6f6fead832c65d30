"""Process-wide Gemini client.

Retries are left to tenacity in ``generator`` so requests are never retried
twice; the client itself only carries the API key and an HTTP timeout.
"""

from google import genai
from google.genai import types

from wiki_responder.config import get_settings

GEMINI_TIMEOUT_MS = 60_000

_client: genai.Client | None = None


def get_gemini_client() -> genai.Client:
    """Return the shared Gemini client, building it on first use."""
    global _client
    if _client is None:
        _client = genai.Client(
            api_key=get_settings().gemini_api_key,
            http_options=types.HttpOptions(timeout=GEMINI_TIMEOUT_MS),
        )
    return _client


def reset_client() -> None:
    """Drop the shared client so the next call rebuilds it from settings."""
    global _client
    _client = None
