"""
Recipe extraction controller.

Owns one add-recipe draft and turns a pasted video URL into a pre-filled
draft without blocking manual editing:

    URL change -> debounce (1 s, last keystroke wins) -> host check
        -> relay call -> parse reply -> merge into draft

All state changes happen on the asyncio event loop that drives the form.
The relay call runs in the loop's default executor. Each call is tagged with
the URL it was issued for, and its reply is dropped if the draft's URL has
changed in the meantime.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set

from ..services.relay_client import RelayError
from .draft import (
    DraftValidationError,
    RecipeDraft,
    apply_parsed,
    clear_video_url,
    set_video_url,
    to_record,
    validate_submission,
)
from .parser import Unparsable, parse_webhook_response


logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 1.0
SUPPORTED_VIDEO_HOSTS = ('tiktok.com', 'youtube.com', 'youtu.be', 'instagram.com')


def is_supported_video_url(url: str) -> bool:
    """True when the URL mentions one of the recognized video hosts."""
    return any(host in url for host in SUPPORTED_VIDEO_HOSTS)


@dataclass(frozen=True)
class Notification:
    """User-facing toast raised by the controller."""
    title: str
    description: str
    variant: str = 'default'


class ExtractionController:
    """
    Controller for the add-recipe form.

    Args:
        relay: Object with ``send(video_url) -> WebhookEnvelope`` raising RelayError
        store: Object with ``insert_recipe(record) -> dict``, needed for submit
        notify: Callback receiving each Notification
        debounce_seconds: Quiet period after the last URL change
    """

    def __init__(
        self,
        relay,
        store=None,
        notify: Optional[Callable[[Notification], None]] = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ):
        self._relay = relay
        self._store = store
        self._notify = notify or (lambda notification: None)
        self.debounce_seconds = debounce_seconds

        self._draft = RecipeDraft()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._in_flight = 0
        self.submitting = False

    @property
    def draft(self) -> RecipeDraft:
        return self._draft

    @property
    def is_extracting(self) -> bool:
        return self._in_flight > 0

    def edit(self, change: Callable[..., RecipeDraft], *args: Any) -> RecipeDraft:
        """
        Apply a draft function from ``draft`` to the current draft.

        Example:
            controller.edit(update_ingredient, 0, "2 eggs")
        """
        self._draft = change(self._draft, *args)
        return self._draft

    # =========================================================================
    # Video URL field
    # =========================================================================

    def on_video_url_change(self, value: str) -> None:
        """Record a keystroke in the URL field and (re)start the debounce timer."""
        self._draft = set_video_url(self._draft, value)
        self._cancel_timer()
        if not value.strip():
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._on_debounce_settled, value)

    def clear_video_url(self) -> None:
        """Explicit clear: reset extracted fields from any state."""
        self._cancel_timer()
        self._draft = clear_video_url(self._draft)

    def discard(self) -> None:
        """Drop the draft, e.g. on navigation away from the form."""
        self._cancel_timer()
        self._draft = RecipeDraft()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_debounce_settled(self, url: str) -> None:
        self._timer = None
        if not is_supported_video_url(url):
            logger.debug("Skipping extraction for unsupported URL: %s", url)
            return

        task = asyncio.get_running_loop().create_task(self._extract(url))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, url: str) -> bool:
        return self._draft.video_url == url

    async def _extract(self, url: str) -> None:
        loop = asyncio.get_running_loop()
        self._in_flight += 1
        try:
            envelope = await loop.run_in_executor(None, self._relay.send, url)
        except RelayError as e:
            logger.warning("Relay call failed for %s: %s", url, e)
            if self._is_current(url):
                self._notify(Notification(
                    title="Error",
                    description="Failed to extract recipe from the video link",
                    variant='destructive',
                ))
            return
        finally:
            self._in_flight -= 1

        if not self._is_current(url):
            logger.info("Discarding stale extraction reply for %s", url)
            return

        result = parse_webhook_response(envelope.response)
        if isinstance(result, Unparsable):
            logger.info("Webhook reply for %s not parsable: %s", url, result.reason)
            self._notify(Notification(
                title="Recipe Link Sent",
                description="The video is being processed. Please check the recipe details manually.",
            ))
            return

        self._draft = apply_parsed(self._draft, result)
        self._notify(Notification(
            title="Recipe Extracted!",
            description="The recipe was filled in from the video. Please review and edit as needed.",
        ))

    async def wait_idle(self) -> None:
        """Wait until no debounce timer is pending and no relay call is in flight."""
        loop = asyncio.get_running_loop()
        while self._timer is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks))
            else:
                await asyncio.sleep(max(0.0, self._timer.when() - loop.time()))

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Validate and store the draft.

        Returns:
            The stored row, or None when validation or storage failed. The
            draft is reset only after a successful store.
        """
        if not user_id:
            self._notify(Notification(
                title="Authentication Required",
                description="Please sign in to add recipes",
                variant='destructive',
            ))
            return None

        try:
            validate_submission(self._draft)
        except DraftValidationError as e:
            self._notify(Notification(title=e.title, description=e.description, variant='destructive'))
            return None

        if self._store is None:
            raise RuntimeError("ExtractionController has no recipe store configured")

        record = to_record(self._draft, user_id)
        loop = asyncio.get_running_loop()
        self.submitting = True
        try:
            saved = await loop.run_in_executor(None, self._store.insert_recipe, record)
        except Exception as e:
            logger.error("Error adding recipe: %s", e)
            self._notify(Notification(
                title="Error",
                description="Failed to add recipe",
                variant='destructive',
            ))
            return None
        finally:
            self.submitting = False

        self._notify(Notification(title="Success!", description="Recipe added successfully"))
        self.discard()
        return saved
