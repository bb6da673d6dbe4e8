from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

import yaml

from ..domain.models import Task, TaskList, User, now_iso
from ..io_utils import FileLock, atomic_write_yaml
from .interfaces import ListRepository, TaskRepository, UserRepository

T = TypeVar("T")


class _YamlCollectionRepo(Generic[T]):
    """One YAML file holding ``{version, <key>: [...]}`` guarded by locks."""

    def __init__(
        self,
        path: Path,
        lock_path: Path,
        key: str,
        loader: Callable[[dict[str, Any]], T],
        dumper: Callable[[T], dict[str, Any]],
    ) -> None:
        self._path = path
        self._lock = FileLock(lock_path)
        self._thread_lock = threading.RLock()
        self._key = key
        self._loader = loader
        self._dumper = dumper

    def _load(self) -> list[T]:
        if not self._path.exists():
            return []
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            return []
        items = raw.get(self._key, [])
        if not isinstance(items, list):
            return []
        return [self._loader(item) for item in items if isinstance(item, dict)]

    def _save(self, items: list[T]) -> None:
        atomic_write_yaml(self._path, {"version": 1, self._key: [self._dumper(item) for item in items]})

    def read(self) -> list[T]:
        with self._thread_lock:
            with self._lock:
                return self._load()

    def upsert_many(self, updates: list[T], key: Callable[[T], str], touch: Callable[[T], None]) -> list[T]:
        with self._thread_lock:
            with self._lock:
                items = self._load()
                index = {key(item): idx for idx, item in enumerate(items)}
                for item in updates:
                    touch(item)
                    idx = index.get(key(item))
                    if idx is None:
                        index[key(item)] = len(items)
                        items.append(item)
                    else:
                        items[idx] = item
                self._save(items)
        return updates

    def delete_where(self, predicate: Callable[[T], bool]) -> int:
        with self._thread_lock:
            with self._lock:
                items = self._load()
                keep = [item for item in items if not predicate(item)]
                removed = len(items) - len(keep)
                if removed:
                    self._save(keep)
        return removed


def _touch(record: Any) -> None:
    record.updated_at = now_iso()


class FileUserRepository(UserRepository):
    def __init__(self, path: Path, lock_path: Path) -> None:
        self._repo = _YamlCollectionRepo[User](path, lock_path, "users", User.from_dict, lambda u: u.to_dict())

    def list(self) -> list[User]:
        return self._repo.read()

    def get(self, user_id: str) -> Optional[User]:
        for user in self.list():
            if user.id == user_id:
                return user
        return None

    def get_by_email(self, email: str) -> Optional[User]:
        needle = email.strip().lower()
        for user in self.list():
            if user.email.lower() == needle:
                return user
        return None

    def upsert(self, user: User) -> User:
        self._repo.upsert_many([user], key=lambda u: u.id, touch=lambda u: None)
        return user


class FileListRepository(ListRepository):
    def __init__(self, path: Path, lock_path: Path) -> None:
        # tasks live in their own collection; never persist the embedded copy
        self._repo = _YamlCollectionRepo[TaskList](path, lock_path, "lists", TaskList.from_dict, lambda tl: tl.to_dict())

    def list(self) -> list[TaskList]:
        return self._repo.read()

    def for_owner(self, owner_id: str) -> list[TaskList]:
        return [tl for tl in self.list() if tl.owner_id == owner_id]

    def get(self, list_id: str) -> Optional[TaskList]:
        for task_list in self.list():
            if task_list.id == list_id:
                return task_list
        return None

    def upsert(self, task_list: TaskList) -> TaskList:
        self.upsert_many([task_list])
        return task_list

    def upsert_many(self, task_lists: Iterable[TaskList]) -> list[TaskList]:
        return self._repo.upsert_many(list(task_lists), key=lambda tl: tl.id, touch=_touch)

    def delete(self, list_id: str) -> bool:
        return self._repo.delete_where(lambda tl: tl.id == list_id) > 0


class FileTaskRepository(TaskRepository):
    def __init__(self, path: Path, lock_path: Path) -> None:
        self._repo = _YamlCollectionRepo[Task](path, lock_path, "tasks", Task.from_dict, lambda t: t.to_dict())

    def list(self) -> list[Task]:
        return self._repo.read()

    def for_lists(self, list_ids: Iterable[str]) -> list[Task]:
        wanted = set(list_ids)
        return [t for t in self.list() if t.list_id in wanted]

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.list():
            if task.id == task_id:
                return task
        return None

    def upsert(self, task: Task) -> Task:
        self.upsert_many([task])
        return task

    def upsert_many(self, tasks: Iterable[Task]) -> list[Task]:
        return self._repo.upsert_many(list(tasks), key=lambda t: t.id, touch=_touch)

    def delete(self, task_id: str) -> bool:
        return self._repo.delete_where(lambda t: t.id == task_id) > 0

    def delete_for_list(self, list_id: str) -> int:
        return self._repo.delete_where(lambda t: t.list_id == list_id)
