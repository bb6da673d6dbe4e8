"""Domain records for users, lists and tasks.

Records serialize to snake_case dicts for storage.  ``from_dict`` also
accepts the camelCase keys used on the wire (``listId``, ``ownerId`` ...)
so the REST client can hydrate records straight from JSON responses.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def coerce(cls, raw: Any, default: "Priority | None" = None) -> "Priority":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).lower())
        except ValueError:
            return default or cls.MEDIUM


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class User:
    id: str = field(default_factory=lambda: _id("user"))
    name: str = ""
    email: str = ""
    password_hash: str = ""
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "created_at": self.created_at,
        }

    def public_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=str(data.get("id") or _id("user")),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            password_hash=str(_pick(data, "password_hash", "passwordHash", default="")),
            created_at=str(_pick(data, "created_at", "createdAt", default=now_iso())),
        )


@dataclass
class Task:
    """A single to-do item.  ``list_id`` plus ``order`` fix its position."""

    id: str = field(default_factory=lambda: _id("task"))
    title: str = ""
    description: Optional[str] = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    deadline: Optional[str] = None
    order: int = 0
    list_id: str = ""
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "deadline": self.deadline,
            "order": self.order,
            "list_id": self.list_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        return cls(
            id=str(data.get("id") or _id("task")),
            title=str(data.get("title") or ""),
            description=_optional_str(data.get("description")),
            completed=bool(data.get("completed", False)),
            priority=Priority.coerce(data.get("priority")),
            deadline=_optional_str(data.get("deadline")),
            order=int(data.get("order") or 0),
            list_id=str(_pick(data, "list_id", "listId", default="")),
            created_at=str(_pick(data, "created_at", "createdAt", default=now_iso())),
            updated_at=str(_pick(data, "updated_at", "updatedAt", default=now_iso())),
        )


@dataclass
class TaskList:
    """An ordered, named container of tasks owned by one user.

    ``tasks`` is only populated for board views; storage keeps tasks in
    their own collection keyed by ``list_id``.
    """

    id: str = field(default_factory=lambda: _id("list"))
    title: str = ""
    order: int = 0
    owner_id: str = ""
    tasks: list[Task] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def task_ids(self) -> list[str]:
        return [t.id for t in self.tasks]

    def to_dict(self, include_tasks: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "order": self.order,
            "owner_id": self.owner_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_tasks:
            data["tasks"] = [t.to_dict() for t in self.tasks]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskList":
        tasks = [Task.from_dict(t) for t in list(data.get("tasks") or []) if isinstance(t, dict)]
        return cls(
            id=str(data.get("id") or _id("list")),
            title=str(data.get("title") or ""),
            order=int(data.get("order") or 0),
            owner_id=str(_pick(data, "owner_id", "ownerId", default="")),
            tasks=tasks,
            created_at=str(_pick(data, "created_at", "createdAt", default=now_iso())),
            updated_at=str(_pick(data, "updated_at", "updatedAt", default=now_iso())),
        )
