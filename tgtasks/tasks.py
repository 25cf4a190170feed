"""
User and task operations on top of a ``DbClient``.

Route handlers call these; they raise ``ApiError`` subclasses which the app
renders as JSON error responses.
"""

from __future__ import annotations

import logging
from typing import Optional

from tgtasks.db import DbClient, TaskRecord, UserRecord
from tgtasks.errors import DuplicateUserError, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def get_or_create_user(
    db: DbClient,
    telegram_id: str,
    *,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    username: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> UserRecord:
    """
    Return the user for ``telegram_id``, creating it with default counters on
    first login. Profile fields of an existing user are left as stored.
    """
    if not telegram_id:
        raise ValidationFailed("Telegram ID is required")

    user = db.get_user(telegram_id)
    if user:
        return user

    try:
        user = db.create_user(
            UserRecord(
                telegram_id=telegram_id,
                first_name=first_name,
                last_name=last_name,
                username=username,
                photo_url=photo_url,
            )
        )
    except DuplicateUserError:
        # Another request created the user between the read and the insert.
        user = db.get_user(telegram_id)
        if user is None:
            raise
        return user

    logger.info("Created user %s", telegram_id)
    return user


def _require_user(db: DbClient, telegram_id: str) -> UserRecord:
    user = db.get_user(telegram_id)
    if not user:
        raise NotFound("User not found")
    return user


def add_task(
    db: DbClient,
    telegram_id: Optional[str],
    task_id: Optional[str],
    description: Optional[str],
) -> list[TaskRecord]:
    if not telegram_id or not task_id or not description:
        raise ValidationFailed("Invalid task data")

    user = _require_user(db, telegram_id)
    if user.find_task(task_id):
        raise ValidationFailed("Task already exists")

    user.tasks.append(TaskRecord(task_id=task_id, description=description))
    db.save_user(user)
    logger.info("Added task %s for user %s", task_id, telegram_id)
    return user.tasks


def list_tasks(db: DbClient, telegram_id: Optional[str]) -> list[TaskRecord]:
    if not telegram_id:
        raise ValidationFailed("Telegram ID is required")
    return _require_user(db, telegram_id).tasks


def complete_task(
    db: DbClient, telegram_id: Optional[str], task_id: Optional[str]
) -> list[TaskRecord]:
    if not telegram_id or not task_id:
        raise ValidationFailed("Invalid task data")

    user = _require_user(db, telegram_id)
    task = user.find_task(task_id)
    if not task:
        raise NotFound("Task not found")

    task.completed = True
    db.save_user(user)
    logger.info("Completed task %s for user %s", task_id, telegram_id)
    return user.tasks
