"""
FastAPI application for the recipe backend.

Provides REST endpoints for:
- Relaying recipe video URLs to the extraction workflow
- Browsing, adding and deleting recipes
- Favorites and user profiles

Run with:
    cd backend
    source venv/bin/activate
    uvicorn recipe_api.main:app --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from .config import configure_logging, get_cors_origins
from .routes import favorites, profiles, recipes, relay
from .services.database import db_pool


configure_logging()
logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


class PreflightCORSMiddleware(CORSMiddleware):
    """
    CORS middleware that answers every preflight from an allowed origin.

    Requests for headers outside the allow list still get 200 with the
    configured allow headers; the browser then decides whether to proceed.
    """

    def preflight_response(self, request_headers):
        response = super().preflight_response(request_headers)
        origin = request_headers["origin"]
        if response.status_code == 200 or not self.is_allowed_origin(origin):
            return response

        headers = dict(self.preflight_headers)
        if self.preflight_explicit_allow_origin:
            headers["Access-Control-Allow-Origin"] = origin
        return PlainTextResponse("OK", status_code=200, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes database connection on startup and closes it on shutdown.
    """
    try:
        db_pool.initialize()
        logger.info("Database connection initialized")
    except Exception as e:
        logger.warning("Could not initialize database: %s", e)
        logger.warning("Recipe endpoints will fail until the database is reachable")

    yield

    db_pool.close()
    logger.info("Database connection closed")


app = FastAPI(
    title="Recipe Library API",
    description="Recipe library backend with video-link extraction relay",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)

# Include routers
app.include_router(relay.router)
app.include_router(recipes.router)
app.include_router(favorites.router)
app.include_router(profiles.router)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: datetime
    database: str


@app.get("/api/health", response_model=HealthResponse, tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        Health status including database connectivity
    """
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        database=db_pool.ping(),
    )


@app.get("/", tags=["root"])
def root():
    """
    Root endpoint with API information.

    Returns:
        API welcome message and documentation link
    """
    return {
        "message": "Recipe Library API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }
