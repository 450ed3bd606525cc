"""FastAPI application entrypoint for restwell."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from restwell.api.users import router as users_router
from restwell.core.config import get_settings
from restwell.core.errors import register_error_handlers
from restwell.core.logging_config import configure_logging
from restwell.db.base import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info("Starting %s with settings=%s", settings.service_name, settings.safe_for_logging())
    if settings.create_schema:
        init_db()
    yield


def create_app() -> FastAPI:
    """Build the restwell application with its exception listener attached."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.service_name, lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(users_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check stub endpoint for service readiness."""
        return {"status": "ok"}

    return app


app = create_app()
