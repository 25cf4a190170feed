"""
HTTP routes for the task service API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from tgtasks import tasks as task_ops
from tgtasks.config import Settings
from tgtasks.db import DbClient, TaskRecord
from tgtasks.dependencies import get_app_settings, get_db_client, get_json_body
from tgtasks.errors import ValidationFailed
from tgtasks.schemas import (
    AddTaskRequest,
    AuthResponse,
    CompleteTaskRequest,
    ErrorResponse,
    TaskOut,
    TasksResponse,
    TelegramIdentity,
    UserOut,
)
from tgtasks.telegram_auth import verify_auth_data

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _tasks_out(tasks: list[TaskRecord]) -> list[TaskOut]:
    return [TaskOut.from_record(task) for task in tasks]


@router.post("/auth", response_model=AuthResponse, responses=ERROR_RESPONSES)
def auth(
    body: dict = Depends(get_json_body),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    """
    Verify Login Widget data and return the user, creating it on first login.

    The signature covers the body exactly as sent, so it is checked before
    any field is parsed.
    """
    verify_auth_data(body, body.get("hash"), settings.bot_token)

    try:
        identity = TelegramIdentity.model_validate(body)
    except ValidationError as exc:
        raise ValidationFailed("Invalid authorization data") from exc

    user = task_ops.get_or_create_user(
        db,
        identity.id,
        first_name=identity.first_name,
        last_name=identity.last_name,
        username=identity.username,
        photo_url=identity.photo_url,
    )
    return AuthResponse(
        message="Authorization successful", user=UserOut.from_record(user)
    )


@router.post("/tasks/add", response_model=TasksResponse, responses=ERROR_RESPONSES)
def add_task(payload: AddTaskRequest, db: DbClient = Depends(get_db_client)):
    tasks = task_ops.add_task(
        db, payload.telegramId, payload.taskId, payload.description
    )
    return TasksResponse(message="Task added successfully", tasks=_tasks_out(tasks))


@router.get(
    "/tasks",
    response_model=TasksResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
def get_tasks(
    telegramId: Optional[str] = Query(None),
    db: DbClient = Depends(get_db_client),
):
    tasks = task_ops.list_tasks(db, telegramId)
    return TasksResponse(tasks=_tasks_out(tasks))


@router.post(
    "/tasks/complete", response_model=TasksResponse, responses=ERROR_RESPONSES
)
def complete_task(payload: CompleteTaskRequest, db: DbClient = Depends(get_db_client)):
    tasks = task_ops.complete_task(db, payload.telegramId, payload.taskId)
    return TasksResponse(
        message="Task marked as complete", tasks=_tasks_out(tasks)
    )
