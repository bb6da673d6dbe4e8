from __future__ import annotations

from pathlib import Path

from ..constants import LISTS_FILE, TASKS_FILE, USERS_FILE
from .file_repos import FileListRepository, FileTaskRepository, FileUserRepository


def _lock_for(path: Path) -> Path:
    return path.with_suffix(".lock")


class StorageContainer:
    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir.resolve()
        self.data_dir.mkdir(parents=True, exist_ok=True)

        users = self.data_dir / USERS_FILE
        lists = self.data_dir / LISTS_FILE
        tasks = self.data_dir / TASKS_FILE
        self.users = FileUserRepository(users, _lock_for(users))
        self.lists = FileListRepository(lists, _lock_for(lists))
        self.tasks = FileTaskRepository(tasks, _lock_for(tasks))
