"""Entry point for the shopping planner service.

Configures logging, builds the FastAPI application, and starts the
uvicorn server.
"""

from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI

from common import setup_logging

from shop_planner.api import create_app
from shop_planner.config import Settings, get_settings

logger = structlog.get_logger(__name__)


def build_app(settings: Settings | None = None) -> FastAPI:
    """Construct the fully-configured application."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_logs=settings.environment == "production")

    app = create_app(settings)

    logger.info(
        "application_ready",
        service=settings.service_name,
        version=settings.service_version,
        location_service=settings.location_service_url or None,
        max_combination_size=settings.max_combination_size,
    )
    return app


def main() -> None:
    """Launch the shopping planner server."""
    settings = get_settings()
    app = build_app(settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
