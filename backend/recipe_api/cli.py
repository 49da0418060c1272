#!/usr/bin/env python3
"""
Extract a recipe draft from a video URL through the relay.

Feeds the URL into an extraction controller exactly as the add-recipe form
does, waits for the debounce and the relay call, and prints the draft.

Usage:
    recipe-extract https://www.youtube.com/watch?v=abc
    recipe-extract https://www.tiktok.com/@chef/video/1 --relay-url http://localhost:8000/api/send-recipe-link
    recipe-extract https://youtu.be/abc --save --user-id <uuid>
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

from .config import configure_logging
from .extraction.controller import DEBOUNCE_SECONDS, ExtractionController, Notification
from .extraction.draft import RecipeDraft
from .services.recipe_store import RecipeStore
from .services.relay_client import RelayClient


def print_notification(notification: Notification) -> None:
    marker = "!" if notification.variant == 'destructive' else "*"
    print(f"[{marker}] {notification.title}: {notification.description}", flush=True)


async def run_extraction(
    url: str,
    relay: RelayClient,
    store: Optional[RecipeStore] = None,
    user_id: Optional[str] = None,
    debounce: float = DEBOUNCE_SECONDS,
) -> Tuple[RecipeDraft, Optional[Dict[str, Any]]]:
    """Run one extraction and return the draft plus the stored row, if saved."""
    controller = ExtractionController(
        relay,
        store=store,
        notify=print_notification,
        debounce_seconds=debounce,
    )
    controller.on_video_url_change(url)
    await controller.wait_idle()

    draft = controller.draft
    saved = None
    if store is not None and draft.auto_filled:
        saved = await controller.submit(user_id)
    return draft, saved


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()

    parser = argparse.ArgumentParser(description='Extract a recipe draft from a video URL')
    parser.add_argument('url', help='TikTok, YouTube or Instagram video URL')
    parser.add_argument('--relay-url', help='Relay endpoint (default: RELAY_URL or localhost)')
    parser.add_argument('--timeout', type=float, help='Relay timeout in seconds')
    parser.add_argument('--debounce', type=float, default=DEBOUNCE_SECONDS,
                        help='Seconds to wait after the URL is entered')
    parser.add_argument('--save', action='store_true', help='Store the extracted recipe')
    parser.add_argument('--user-id', help='Owner of the saved recipe (required with --save)')
    args = parser.parse_args(argv)

    if args.save and not args.user_id:
        parser.error('--user-id is required with --save')

    relay = RelayClient(relay_url=args.relay_url, timeout=args.timeout)
    store = RecipeStore() if args.save else None
    try:
        draft, saved = asyncio.run(run_extraction(
            args.url,
            relay,
            store=store,
            user_id=args.user_id,
            debounce=args.debounce,
        ))
    finally:
        relay.close()

    print(json.dumps(asdict(draft), indent=2, ensure_ascii=False))
    if args.save:
        if saved is None:
            return 1
        print(f"Saved recipe {saved['id']}")
    return 0 if draft.auto_filled else 1


if __name__ == '__main__':
    sys.exit(main())
