"""
Pydantic schemas for the task service API.

Field names follow the JSON wire format used by the mini-app frontend.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tgtasks.db import TaskRecord, UserRecord


class TelegramIdentity(BaseModel):
    """
    Identity fields read from Login Widget data after its signature has been
    checked against the raw body. Other widget fields are ignored here.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None


class AddTaskRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, str_strip_whitespace=True)

    telegramId: Optional[str] = None
    taskId: Optional[str] = None
    description: Optional[str] = None


class CompleteTaskRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, str_strip_whitespace=True)

    telegramId: Optional[str] = None
    taskId: Optional[str] = None


class TaskOut(BaseModel):
    taskId: str
    description: str
    completed: bool = False

    @classmethod
    def from_record(cls, task: TaskRecord) -> "TaskOut":
        return cls(**task.as_dict())


class UserOut(BaseModel):
    telegramId: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    username: Optional[str] = None
    photoUrl: Optional[str] = None
    balance: float = 0
    referralCount: int = 0
    referralBonus: float = 0
    tasks: list[TaskOut] = Field(default_factory=list)

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserOut":
        return cls(**user.as_dict())


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserOut


class TasksResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    tasks: list[TaskOut]


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
