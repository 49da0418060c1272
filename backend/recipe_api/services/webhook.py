"""
Outbound client for the external workflow-automation webhook.

The relay route hands a video URL to ``forward_recipe_url``; this module
builds the payload, posts it, and returns the reply as JSON when it parses
or as raw text when it does not.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    PAYLOAD_MINIMAL,
    get_webhook_payload_variant,
    get_webhook_timeout,
    get_webhook_url,
)


logger = logging.getLogger(__name__)

WEBHOOK_ACTION = "fetch_specific_recipe"
SUCCESS_MESSAGE = "Recipe link sent successfully"


class WebhookError(Exception):
    """Raised when the automation webhook cannot be reached or answers non-2xx."""


class WebhookEnvelope(BaseModel):
    """Normalized relay reply. Serialized with camelCase keys on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: Optional[str] = None
    response: Any = None
    original_url: str = Field(alias="originalUrl")
    timestamp: Optional[str] = None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_webhook_payload(recipe_url: str, variant: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the body sent to the automation webhook.

    The enriched variant repeats the URL under the alias names the workflow
    may look for and tags the request with an action and timestamp.
    """
    variant = variant or get_webhook_payload_variant()
    if variant == PAYLOAD_MINIMAL:
        return {"recipeUrl": recipe_url}

    return {
        "recipeUrl": recipe_url,
        "videoUrl": recipe_url,
        "url": recipe_url,
        "timestamp": utc_timestamp(),
        "action": WEBHOOK_ACTION,
    }


def decode_webhook_body(text: str) -> Any:
    """Parse the webhook body as JSON, falling back to the raw text."""
    try:
        parsed = json.loads(text)
    except ValueError:
        logger.info("Webhook response is not JSON, treating as text")
        return text
    logger.debug("Parsed webhook response: %s", parsed)
    return parsed


def forward_recipe_url(
    recipe_url: str,
    session: Optional[requests.Session] = None,
) -> Any:
    """
    Send a recipe URL to the automation webhook and return its reply.

    Args:
        recipe_url: Video URL supplied by the client
        session: Optional requests session (tests pass a mock)

    Returns:
        Decoded JSON reply, or the raw body text when it is not JSON

    Raises:
        WebhookError: On missing configuration, transport failure or non-2xx
    """
    webhook_url = get_webhook_url()
    if not webhook_url:
        raise WebhookError("N8N_WEBHOOK_URL is not configured")

    payload = build_webhook_payload(recipe_url)
    logger.info("Sending payload to webhook: %s", json.dumps(payload))

    http = session or requests
    try:
        response = http.post(
            webhook_url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=get_webhook_timeout(),
        )
    except requests.exceptions.RequestException as e:
        logger.error("Webhook request error: %s", e)
        raise WebhookError(f"Webhook request error: {e}") from e

    logger.info("Webhook response status: %s %s", response.status_code, response.reason)

    if response.status_code < 200 or response.status_code >= 300:
        logger.error("Webhook request failed: %s %s", response.status_code, response.text)
        raise WebhookError(
            f"Webhook request failed with status: {response.status_code} - {response.text}"
        )

    return decode_webhook_body(response.text)


def build_envelope(recipe_url: str, response: Any) -> WebhookEnvelope:
    return WebhookEnvelope(
        success=True,
        message=SUCCESS_MESSAGE,
        response=response,
        original_url=recipe_url,
        timestamp=utc_timestamp(),
    )
