"""Slack webhook router: parsing, signature verification, and envelope dispatch."""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from wiki_responder.slack.handlers import EventRouter
from wiki_responder.slack.verification import is_valid_slack_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["slack"])


@router.post("/slack/events")
async def slack_events(request: Request) -> JSONResponse:
    """Receive Slack webhook events.

    - malformed JSON: 500, the only non-200 response
    - bad or stale signature: 200 with ok=false, so Slack does not retry
    - url_verification: echo the challenge token
    - event_callback: run through the EventRouter and report its result
    - anything else: acknowledge with 200
    """
    body = await request.body()

    try:
        payload = json.loads(body)
    except ValueError:
        logger.error("Unparseable Slack payload (%d bytes)", len(body))
        return JSONResponse({"ok": False, "error": "malformed payload"}, status_code=500)

    if not isinstance(payload, dict):
        logger.error("Slack payload is not a JSON object")
        return JSONResponse({"ok": False, "error": "malformed payload"}, status_code=500)

    if not is_valid_slack_request(request.headers, body):
        return JSONResponse({"ok": False, "status": "verification_failed"})

    if payload.get("type") == "url_verification":
        logger.info("Answering URL verification challenge")
        return JSONResponse({"challenge": payload.get("challenge")})

    if payload.get("type") == "event_callback" and payload.get("event"):
        event_router: EventRouter = request.app.state.event_router
        status = await event_router.dispatch(payload, request.headers)
        return JSONResponse({"ok": True, "status": status})

    return JSONResponse({"ok": True})
