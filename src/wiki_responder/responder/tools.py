"""Function-calling tools exposed to Gemini: Backlog wiki search and page retrieval."""

import logging
from collections.abc import Awaitable, Callable

from google.genai import types

from wiki_responder.responder.wiki import WikiError, get_wiki_content, search_wiki

logger = logging.getLogger(__name__)

SEARCH_WIKI = "search_backlog_wiki"
GET_WIKI_CONTENT = "get_backlog_wiki_content"

WIKI_TOOL = types.Tool(
    function_declarations=[
        types.FunctionDeclaration(
            name=SEARCH_WIKI,
            description="Search Backlog wiki pages by keyword.",
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "keyword": types.Schema(type=types.Type.STRING),
                    "project_id": types.Schema(
                        type=types.Type.STRING,
                        description="Backlog project id or key. Optional.",
                    ),
                    "max_results": types.Schema(
                        type=types.Type.INTEGER,
                        description="Maximum number of pages to return. Defaults to 10.",
                    ),
                },
                required=["keyword"],
            ),
        ),
        types.FunctionDeclaration(
            name=GET_WIKI_CONTENT,
            description="Fetch the content of a Backlog wiki page.",
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "wiki_id": types.Schema(
                        type=types.Type.STRING,
                        description="ID of the wiki page to fetch.",
                    ),
                },
                required=["wiki_id"],
            ),
        ),
    ]
)


class ToolArgumentError(ValueError):
    """Gemini called a tool with missing or malformed arguments."""


def _required_str(args: dict, key: str) -> str:
    value = args.get(key)
    if value is None or str(value).strip() == "":
        raise ToolArgumentError(f"Missing required argument: {key}")
    return str(value).strip()


def _max_results(args: dict) -> int:
    value = args.get("max_results")
    if value is None:
        return 10
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ToolArgumentError(f"max_results must be an integer, got {value!r}") from None
    if count < 1:
        raise ToolArgumentError(f"max_results must be positive, got {count}")
    return count


async def run_tool(
    name: str,
    args: dict,
    progress: Callable[[str], Awaitable[None]] | None = None,
) -> dict:
    """Execute a tool call from Gemini and return the function response payload.

    Bad arguments and wiki failures are returned to the model as
    ``{"error": ...}`` so it can retry or tell the user instead of the whole
    reply failing.
    """
    try:
        if name == SEARCH_WIKI:
            keyword = _required_str(args, "keyword")
            max_results = _max_results(args)
            if progress:
                await progress(f'Searching the Backlog wiki for "{keyword}"...')
            pages = await search_wiki(
                keyword,
                project_id=args.get("project_id") or None,
                max_results=max_results,
            )
            return {"pages": [page.model_dump() for page in pages]}

        if name == GET_WIKI_CONTENT:
            wiki_id = _required_str(args, "wiki_id")
            if progress:
                await progress(f"Reading Backlog wiki page {wiki_id}...")
            content = await get_wiki_content(wiki_id)
            return content.model_dump()
    except (ToolArgumentError, WikiError) as exc:
        logger.warning("Tool %s failed: %s", name, exc)
        return {"error": str(exc)}

    logger.warning("Gemini requested unknown tool %s", name)
    return {"error": f"Unknown tool: {name}"}
