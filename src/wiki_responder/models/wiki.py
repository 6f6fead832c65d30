"""Backlog wiki models returned by the wiki lookup tools."""

from pydantic import BaseModel


class WikiPage(BaseModel):
    """A wiki search hit (no body)."""

    id: str
    name: str
    updated: str | None = None
    project_id: str | None = None


class WikiContent(BaseModel):
    """Full wiki page content."""

    name: str
    updated: str | None = None
    updated_user: str | None = None
    content: str = ""
