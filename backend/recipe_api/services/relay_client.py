"""
Client for the webhook relay endpoint.

Used by the extraction controller: ``send(video_url)`` posts the URL to the
relay and returns the envelope. Every failure mode is reported as a single
RelayError; no retry is attempted.
"""

from typing import Optional

import requests
from pydantic import ValidationError

from ..config import get_relay_timeout, get_relay_url
from .webhook import WebhookEnvelope


class RelayError(Exception):
    """Relay call failed (network, non-2xx, bad envelope, or success=false)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RelayClient:
    """
    Client for the send-recipe-link relay.

    Holds one requests session so repeated extractions reuse the connection.
    """

    def __init__(self, relay_url: Optional[str] = None, timeout: Optional[float] = None):
        self.relay_url = relay_url or get_relay_url()
        self.timeout = timeout if timeout is not None else get_relay_timeout()
        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    def send(self, video_url: str) -> WebhookEnvelope:
        """
        Relay a video URL and return the envelope.

        Raises:
            RelayError: On any transport, status or envelope problem
        """
        try:
            response = self.session.post(
                self.relay_url,
                json={'recipeUrl': video_url},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RelayError(f"Relay network error: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            detail = response.text
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get('details') or body.get('error') or detail
            raise RelayError(
                f"Relay returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        try:
            envelope = WebhookEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise RelayError(f"Relay returned an invalid envelope: {e}",
                             status_code=response.status_code) from e

        if not envelope.success:
            raise RelayError("Relay reported failure", status_code=response.status_code)
        return envelope

    def close(self) -> None:
        self.session.close()
