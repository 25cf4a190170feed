"""
Dependency wiring for the FastAPI app.

The store client and settings are built once by ``create_app`` and kept on
``app.state``; handlers receive them through these dependencies.
"""

from __future__ import annotations

from fastapi import Request

from tgtasks.config import Settings
from tgtasks.db import DbClient
from tgtasks.errors import ValidationFailed


def get_db_client(request: Request) -> DbClient:
    return request.app.state.db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_json_body(request: Request) -> dict:
    """The request body as the client sent it, for signature checks."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationFailed("Invalid JSON body") from exc
    if not isinstance(body, dict):
        raise ValidationFailed("Invalid JSON body")
    return body
