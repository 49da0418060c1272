"""
Environment configuration for the recipe backend.

Loads credentials and endpoints from the backend .env file. Every value is
read through a small getter so tests can patch the environment per call.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


# Load .env from backend directory
_backend_dir = Path(__file__).parent.parent
_env_path = _backend_dir / ".env"
load_dotenv(_env_path)


DEFAULT_RELAY_URL = "http://localhost:8000/api/send-recipe-link"
DEFAULT_WEBHOOK_TIMEOUT = 60.0
DEFAULT_RELAY_TIMEOUT = 120.0

PAYLOAD_MINIMAL = "minimal"
PAYLOAD_ENRICHED = "enriched"


def get_database_url() -> Optional[str]:
    """Get the Postgres URL of the hosted backend from environment variables."""
    return os.getenv("DATABASE_URL") or os.getenv("SUPABASE_DB_URL")


def get_webhook_url() -> Optional[str]:
    """Get the external automation webhook the relay forwards to."""
    return os.getenv("N8N_WEBHOOK_URL")


def get_webhook_payload_variant() -> str:
    """Return which outbound payload shape the relay sends (minimal or enriched)."""
    variant = os.getenv("WEBHOOK_PAYLOAD_VARIANT", PAYLOAD_ENRICHED).strip().lower()
    if variant not in (PAYLOAD_MINIMAL, PAYLOAD_ENRICHED):
        return PAYLOAD_ENRICHED
    return variant


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_webhook_timeout() -> float:
    return _get_float("WEBHOOK_TIMEOUT_SECONDS", DEFAULT_WEBHOOK_TIMEOUT)


def get_relay_url() -> str:
    """Get the relay endpoint used by client-side extraction."""
    return os.getenv("RELAY_URL", DEFAULT_RELAY_URL)


def get_relay_timeout() -> float:
    return _get_float("RELAY_TIMEOUT_SECONDS", DEFAULT_RELAY_TIMEOUT)


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def configure_logging() -> None:
    """Apply the shared log format once for the API and the CLI."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
