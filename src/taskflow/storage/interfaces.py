from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..domain.models import Task, TaskList, User


class UserRepository(ABC):
    @abstractmethod
    def list(self) -> list[User]:
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, user: User) -> User:
        raise NotImplementedError


class ListRepository(ABC):
    @abstractmethod
    def list(self) -> list[TaskList]:
        raise NotImplementedError

    @abstractmethod
    def for_owner(self, owner_id: str) -> list[TaskList]:
        raise NotImplementedError

    @abstractmethod
    def get(self, list_id: str) -> Optional[TaskList]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, task_list: TaskList) -> TaskList:
        raise NotImplementedError

    @abstractmethod
    def upsert_many(self, task_lists: Iterable[TaskList]) -> list[TaskList]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, list_id: str) -> bool:
        raise NotImplementedError


class TaskRepository(ABC):
    @abstractmethod
    def list(self) -> list[Task]:
        raise NotImplementedError

    @abstractmethod
    def for_lists(self, list_ids: Iterable[str]) -> list[Task]:
        raise NotImplementedError

    @abstractmethod
    def get(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, task: Task) -> Task:
        raise NotImplementedError

    @abstractmethod
    def upsert_many(self, tasks: Iterable[Task]) -> list[Task]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete_for_list(self, list_id: str) -> int:
        raise NotImplementedError
