"""FastAPI application with lifespan and health endpoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wiki_responder.config import get_settings
from wiki_responder.dedup import RecentEventCache
from wiki_responder.logging_config import configure_logging
from wiki_responder.slack.handlers import EventRouter
from wiki_responder.slack.router import router as slack_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, load config, build the event router."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    app.state.event_router = EventRouter(RecentEventCache(settings.dedup_capacity))
    logger.info(
        "Event router ready",
        extra={"dedup_capacity": settings.dedup_capacity, "environment": settings.environment},
    )
    yield


app = FastAPI(
    title="Wiki Responder",
    lifespan=lifespan,
)
app.include_router(slack_router)


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run and local development."""
    return {
        "status": "ok",
        "service": "wiki-responder",
        "version": "0.1.0",
    }
