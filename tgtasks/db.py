"""
Document store for user records, backed by SQLAlchemy or kept in memory.

Each user is one document: profile fields, counters and the ordered task
collection. The SQL implementation keeps the tasks as a JSON column so a user
is always read and written as a whole.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from sqlalchemy import JSON, Column, Float, Integer, String, create_engine, make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from tgtasks.errors import DuplicateUserError

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # An in-memory SQLite database lives in one connection; share it
        # across the request threadpool.
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {}


class DbClient(Protocol):
    """Interface for user document access."""

    def get_user(self, telegram_id: str) -> Optional["UserRecord"]:
        ...

    def create_user(self, user: "UserRecord") -> "UserRecord":
        ...

    def save_user(self, user: "UserRecord") -> None:
        ...

    def close(self) -> None:
        ...


@dataclass
class TaskRecord:
    task_id: str
    description: str
    completed: bool = False

    def as_dict(self) -> dict:
        return {
            "taskId": self.task_id,
            "description": self.description,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskRecord":
        return cls(
            task_id=data["taskId"],
            description=data.get("description", ""),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class UserRecord:
    telegram_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None
    balance: float = 0
    referral_count: int = 0
    referral_bonus: float = 0
    tasks: list[TaskRecord] = field(default_factory=list)

    def find_task(self, task_id: str) -> Optional[TaskRecord]:
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None

    def as_dict(self) -> dict:
        return {
            "telegramId": self.telegram_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "username": self.username,
            "photoUrl": self.photo_url,
            "balance": self.balance,
            "referralCount": self.referral_count,
            "referralBonus": self.referral_bonus,
            "tasks": [task.as_dict() for task in self.tasks],
        }


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}

    def get_user(self, telegram_id: str) -> Optional[UserRecord]:
        user = self.users.get(telegram_id)
        return copy.deepcopy(user) if user else None

    def create_user(self, user: UserRecord) -> UserRecord:
        if user.telegram_id in self.users:
            raise DuplicateUserError(user.telegram_id)
        self.users[user.telegram_id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    def save_user(self, user: UserRecord) -> None:
        self.users[user.telegram_id] = copy.deepcopy(user)

    def close(self) -> None:
        return None


class SqlDocumentClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
            **_engine_options(database_url),
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)
        logger.info("Connected to document store (%s)", self.engine.url.get_backend_name())

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            telegram_id=row.telegram_id,
            first_name=row.first_name,
            last_name=row.last_name,
            username=row.username,
            photo_url=row.photo_url,
            balance=row.balance,
            referral_count=row.referral_count,
            referral_bonus=row.referral_bonus,
            tasks=[TaskRecord.from_dict(item) for item in row.tasks or []],
        )

    @staticmethod
    def _apply(row: "UserRow", user: UserRecord) -> None:
        row.first_name = user.first_name
        row.last_name = user.last_name
        row.username = user.username
        row.photo_url = user.photo_url
        row.balance = user.balance
        row.referral_count = user.referral_count
        row.referral_bonus = user.referral_bonus
        # A fresh list so the JSON column is flagged as modified.
        row.tasks = [task.as_dict() for task in user.tasks]

    def get_user(self, telegram_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, telegram_id)
            if not row:
                return None
            return self._to_user_record(row)

    def create_user(self, user: UserRecord) -> UserRecord:
        with self.Session() as session:
            row = UserRow(telegram_id=user.telegram_id)
            self._apply(row, user)
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateUserError(user.telegram_id) from exc
            session.refresh(row)
            return self._to_user_record(row)

    def save_user(self, user: UserRecord) -> None:
        with self.Session() as session:
            row = session.get(UserRow, user.telegram_id)
            if row is None:
                row = UserRow(telegram_id=user.telegram_id)
                session.add(row)
            self._apply(row, user)
            session.commit()

    def close(self) -> None:
        self.engine.dispose()


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    telegram_id = Column(String, primary_key=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    username = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    balance = Column(Float, nullable=False, default=0)
    referral_count = Column(Integer, nullable=False, default=0)
    referral_bonus = Column(Float, nullable=False, default=0)
    tasks = Column(JSON, nullable=False, default=list)
