"""Tests for the Gemini client singleton."""

from unittest.mock import patch

from wiki_responder.responder.client import GEMINI_TIMEOUT_MS, get_gemini_client, reset_client


def test_client_is_cached():
    with patch("wiki_responder.responder.client.genai.Client") as mock_cls:
        first = get_gemini_client()
        second = get_gemini_client()

    assert first is second
    mock_cls.assert_called_once()
    kwargs = mock_cls.call_args.kwargs
    assert kwargs["api_key"] == "test-gemini-key"
    assert kwargs["http_options"].timeout == GEMINI_TIMEOUT_MS


def test_reset_client_rebuilds():
    with patch("wiki_responder.responder.client.genai.Client") as mock_cls:
        get_gemini_client()
        reset_client()
        get_gemini_client()

    assert mock_cls.call_count == 2
