"""Markdown to Slack mrkdwn conversion for generated replies."""

import re

# [label](https://example.com) -> <https://example.com|label>
_MARKDOWN_LINK = re.compile(r"\[(.*?)\]\((.*?)\)")


def to_slack_mrkdwn(text: str) -> str:
    """Convert the Markdown constructs Gemini commonly emits into Slack mrkdwn.

    Links become ``<url|label>`` and ``**bold**`` becomes ``*bold*``.
    """
    return _MARKDOWN_LINK.sub(r"<\2|\1>", text).replace("**", "*")
