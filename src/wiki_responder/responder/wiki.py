"""Backlog wiki lookups over the Backlog REST API (v2)."""

import logging

import httpx

from wiki_responder.config import get_settings
from wiki_responder.models.wiki import WikiContent, WikiPage

logger = logging.getLogger(__name__)

BACKLOG_API_URL = "https://{space_id}.backlog.com/api/v2"


class WikiError(Exception):
    """Backlog wiki request could not be made or returned an error."""


def _credentials() -> tuple[str, str]:
    settings = get_settings()
    if not settings.backlog_space_id or not settings.backlog_api_key:
        raise WikiError("BACKLOG_SPACE_ID or BACKLOG_API_KEY is not configured")
    return settings.backlog_space_id, settings.backlog_api_key


async def _get(url: str, params: dict) -> object:
    """GET a Backlog endpoint and return its decoded JSON body.

    Raises:
        WikiError: On transport errors, non-2xx responses or a non-JSON body.
    """
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(10.0)) as client:
            response = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise WikiError(f"Backlog request failed: {exc}") from exc

    if not response.is_success:
        raise WikiError(f"Backlog API error ({response.status_code}): {response.text}")
    try:
        return response.json()
    except ValueError as exc:
        raise WikiError(f"Backlog returned a non-JSON body: {exc}") from exc


async def search_wiki(
    keyword: str,
    project_id: str | None = None,
    max_results: int = 10,
) -> list[WikiPage]:
    """Search wiki pages by keyword.

    Falls back to the configured ``backlog_project_id`` when no project is
    given; searches every project the key can see when neither is set.

    Args:
        keyword: Search keyword. Empty means no keyword filter.
        project_id: Backlog project id or key.
        max_results: Maximum number of pages to return.
    """
    space_id, api_key = _credentials()
    params: dict = {"apiKey": api_key, "count": max_results}
    if keyword:
        params["keyword"] = keyword
    project = project_id or get_settings().backlog_project_id
    if project:
        params["projectIdOrKey"] = project

    data = await _get(f"{BACKLOG_API_URL.format(space_id=space_id)}/wikis", params)
    try:
        pages = [
            WikiPage(
                id=str(wiki["id"]),
                name=wiki["name"],
                updated=wiki.get("updated"),
                project_id=str(wiki["projectId"]) if wiki.get("projectId") is not None else None,
            )
            for wiki in data
        ]
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise WikiError(f"Unexpected wiki search response: {exc!r}") from exc
    logger.info("Wiki search returned %d page(s)", len(pages), extra={"keyword": keyword})
    return pages


async def get_wiki_content(wiki_id: str) -> WikiContent:
    """Fetch the full content of a single wiki page."""
    space_id, api_key = _credentials()
    data = await _get(
        f"{BACKLOG_API_URL.format(space_id=space_id)}/wikis/{wiki_id}",
        {"apiKey": api_key},
    )
    try:
        updated_user = data.get("updatedUser") or {}
        return WikiContent(
            name=data["name"],
            updated=data.get("updated"),
            updated_user=updated_user.get("name"),
            content=(data.get("content") or "").strip(),
        )
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise WikiError(f"Unexpected wiki page response: {exc!r}") from exc
