"""
FastAPI application entry point for the task service.

Run with ``uvicorn tgtasks.app:create_app --factory`` or the ``tgtasks``
console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from tgtasks.config import Settings, get_settings
from tgtasks.db import DbClient, SqlDocumentClient
from tgtasks.errors import register_error_handlers
from tgtasks.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s started", app.title)
    yield
    app.state.db.close()
    logger.info("Document store connection closed")


def create_app(
    settings: Optional[Settings] = None, db: Optional[DbClient] = None
) -> FastAPI:
    if settings is None:
        settings = get_settings()
    if db is None:
        db = SqlDocumentClient(settings.database_url)
    app = FastAPI(title="Telegram Tasks Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    register_error_handlers(app)
    app.include_router(router)
    return app
