"""Pydantic request and response models for the REST API.

Wire format is camelCase (``listId``, ``ownerId``, ``createdAt``); request
models also accept snake_case field names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import EMAIL_PATTERN, MIN_NAME_LENGTH, MIN_PASSWORD_LENGTH
from ..domain.models import Priority, Task, TaskList


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_deadline(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("deadline must be an ISO 8601 date or timestamp")
    return value


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    name: str = Field(min_length=MIN_NAME_LENGTH)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class LoginRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str


class UserInfo(BaseModel):
    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserInfo


# ---------------------------------------------------------------------------
# Lists and tasks
# ---------------------------------------------------------------------------

class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    deadline: Optional[str] = None
    order: int
    list_id: str
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskOut":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            priority=task.priority,
            deadline=task.deadline,
            order=task.order,
            list_id=task.list_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class ListOut(CamelModel):
    id: str
    title: str
    order: int
    owner_id: str
    tasks: list[TaskOut] = Field(default_factory=list)
    created_at: str
    updated_at: str

    @classmethod
    def from_list(cls, task_list: TaskList) -> "ListOut":
        return cls(
            id=task_list.id,
            title=task_list.title,
            order=task_list.order,
            owner_id=task_list.owner_id,
            tasks=[TaskOut.from_task(t) for t in task_list.tasks],
            created_at=task_list.created_at,
            updated_at=task_list.updated_at,
        )


class CreateListRequest(CamelModel):
    title: str = Field(min_length=1)
    order: Optional[int] = Field(default=None, ge=0)


class UpdateListRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    order: Optional[int] = Field(default=None, ge=0)


class CreateTaskRequest(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=0)
    priority: Priority = Priority.MEDIUM
    deadline: Optional[str] = None

    @field_validator("deadline")
    @classmethod
    def _deadline(cls, value: Optional[str]) -> Optional[str]:
        return _check_deadline(value)


class UpdateTaskRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    deadline: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=0)
    list_id: Optional[str] = None

    @field_validator("deadline")
    @classmethod
    def _deadline(cls, value: Optional[str]) -> Optional[str]:
        return _check_deadline(value)

    def changes(self) -> dict[str, object]:
        """Fields the client actually sent.  Only description/deadline may be cleared."""
        sent = self.model_dump(exclude_unset=True)
        return {k: v for k, v in sent.items() if v is not None or k in ("description", "deadline")}


class StatusResponse(BaseModel):
    status: str
