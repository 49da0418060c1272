"""
Webhook relay route.

Receives a video URL from the client, forwards it to the automation
webhook, and wraps the reply in a JSON envelope. CORS preflight for this
route is answered by the application's CORS middleware.

The body is read raw so that every failure, including a body that is not
JSON, is answered with the relay's own 400/500 error shapes.
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..services.webhook import (
    WebhookEnvelope,
    WebhookError,
    build_envelope,
    forward_recipe_url,
    utc_timestamp,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["relay"])


def relay_error(details: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": "Failed to send recipe link",
            "details": details,
            "timestamp": utc_timestamp(),
        },
    )


@router.post("/send-recipe-link", response_model=WebhookEnvelope)
async def send_recipe_link(request: Request):
    """
    Relay a recipe video URL to the automation workflow.

    Body: ``{"recipeUrl": "<video url>"}``

    Returns:
        Envelope with the webhook's reply under ``response``. HTTP 400 when
        ``recipeUrl`` is missing, HTTP 500 when the body cannot be decoded or
        the webhook call fails.
    """
    logger.info("Send recipe link function called")

    raw = await request.body()
    body = {}
    if raw.strip():
        try:
            body = json.loads(raw)
        except ValueError as e:
            logger.error("Error in send-recipe-link: invalid JSON body: %s", e)
            return relay_error(f"Invalid JSON body: {e}")

    recipe_url = body.get("recipeUrl") if isinstance(body, dict) else None
    if not recipe_url:
        logger.error("No recipe URL provided")
        return JSONResponse(status_code=400, content={"error": "Recipe URL is required"})

    logger.info("Processing recipe URL: %s", recipe_url)

    try:
        response = await run_in_threadpool(forward_recipe_url, recipe_url)
    except WebhookError as e:
        logger.error("Error in send-recipe-link: %s", e)
        return relay_error(str(e))

    return build_envelope(str(recipe_url), response)
