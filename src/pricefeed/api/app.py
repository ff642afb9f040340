"""FastAPI application factory for the price API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricefeed.api import routes
from pricefeed.config import ApiSettings


def create_app(settings: ApiSettings | None = None, lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: API settings (defaults, CORS origins). Defaults to ApiSettings().
        lifespan: Optional async context manager for startup/shutdown. main.py
                  injects one that wires the store, query service and collector
                  onto app.state.

    Returns:
        Configured FastAPI application. Route handlers expect
        ``app.state.query_service`` to be set; ``app.state.collector`` is
        optional.
    """
    settings = settings or ApiSettings()

    app = FastAPI(title="Pool Price API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.api_settings = settings
    app.state.query_service = None
    app.state.collector = None

    app.include_router(routes.router)

    return app
