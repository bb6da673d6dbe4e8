"""Board service: server-side business rules over the storage repositories.

Every read and write is scoped to one owner.  Rows owned by someone else
are treated exactly like missing rows (the caller gets ``None``/``False``
and answers 404).  Structural changes renumber the affected sequences with
the same order model the client uses, so a refetch always returns
contiguous ``0..n-1`` orders.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Optional

from loguru import logger

from .domain.models import Priority, Task, TaskList, now_iso
from .engine.ordering import clamp_index, renumber, sort_by_order
from .storage import StorageContainer

TASK_FIELDS = {"title", "description", "completed", "priority", "deadline"}


class BoardService:
    def __init__(self, container: StorageContainer) -> None:
        self.container = container
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _owned_lists(self, owner_id: str) -> list[TaskList]:
        return sort_by_order(self.container.lists.for_owner(owner_id))

    def _owned_list(self, owner_id: str, list_id: str) -> Optional[TaskList]:
        task_list = self.container.lists.get(list_id)
        if task_list is None or task_list.owner_id != owner_id:
            return None
        return task_list

    def _tasks_of(self, list_id: str) -> list[Task]:
        return sort_by_order(self.container.tasks.for_lists([list_id]))

    def _owned_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        task = self.container.tasks.get(task_id)
        if task is None or self._owned_list(owner_id, task.list_id) is None:
            return None
        return task

    def get_lists(self, owner_id: str) -> list[TaskList]:
        """Return the owner's lists in order, each embedding its ordered tasks."""
        lists = self._owned_lists(owner_id)
        tasks = self.container.tasks.for_lists([tl.id for tl in lists])
        by_list: dict[str, list[Task]] = {tl.id: [] for tl in lists}
        for task in tasks:
            by_list[task.list_id].append(task)
        return [replace(tl, tasks=sort_by_order(by_list[tl.id])) for tl in lists]

    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        return self._owned_task(owner_id, task_id)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def create_list(self, owner_id: str, title: str, order: Optional[int] = None) -> TaskList:
        with self._lock:
            lists = self._owned_lists(owner_id)
            task_list = TaskList(title=title, owner_id=owner_id)
            lists.insert(clamp_index(order, len(lists)), task_list)
            lists = renumber(lists)
            self.container.lists.upsert_many(lists)
            created = next(tl for tl in lists if tl.id == task_list.id)
        logger.info("Created list {} for {} at order {}", created.id, owner_id, created.order)
        return created

    def update_list(self, owner_id: str, list_id: str, changes: dict[str, Any]) -> Optional[TaskList]:
        with self._lock:
            if self._owned_list(owner_id, list_id) is None:
                return None
            lists = self._owned_lists(owner_id)
            current = next(idx for idx, tl in enumerate(lists) if tl.id == list_id)
            task_list = lists.pop(current)
            if changes.get("title") is not None:
                task_list.title = str(changes["title"])
            position = changes.get("order")
            lists.insert(clamp_index(current if position is None else position, len(lists)), task_list)
            lists = renumber(lists)
            self.container.lists.upsert_many(lists)
            updated = next(tl for tl in lists if tl.id == list_id)
        return replace(updated, tasks=self._tasks_of(list_id))

    def delete_list(self, owner_id: str, list_id: str) -> bool:
        with self._lock:
            if self._owned_list(owner_id, list_id) is None:
                return False
            removed_tasks = self.container.tasks.delete_for_list(list_id)
            self.container.lists.delete(list_id)
            remaining = renumber(self._owned_lists(owner_id))
            if remaining:
                self.container.lists.upsert_many(remaining)
        logger.info("Deleted list {} ({} tasks) for {}", list_id, removed_tasks, owner_id)
        return True

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(
        self,
        owner_id: str,
        list_id: str,
        title: str,
        description: Optional[str] = None,
        order: Optional[int] = None,
        priority: Optional[str] = None,
        deadline: Optional[str] = None,
    ) -> Optional[Task]:
        with self._lock:
            if self._owned_list(owner_id, list_id) is None:
                return None
            task = Task(
                title=title,
                description=description or None,
                priority=Priority.coerce(priority) if priority else Priority.MEDIUM,
                deadline=deadline or None,
                list_id=list_id,
            )
            tasks = self._tasks_of(list_id)
            tasks.insert(clamp_index(order, len(tasks)), task)
            tasks = renumber(tasks)
            self.container.tasks.upsert_many(tasks)
            created = next(t for t in tasks if t.id == task.id)
        logger.info("Created task {} in list {} at order {}", created.id, list_id, created.order)
        return created

    def update_task(self, owner_id: str, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        """Apply field edits and, when ``order``/``list_id`` is given, a move.

        Returns None when the task, or the requested target list, is not
        owned by *owner_id*.
        """
        with self._lock:
            task = self._owned_task(owner_id, task_id)
            if task is None:
                return None
            target_id = changes.get("list_id") or task.list_id
            if target_id != task.list_id and self._owned_list(owner_id, target_id) is None:
                return None

            for key in TASK_FIELDS:
                if key not in changes:
                    continue
                value = changes[key]
                if key == "priority":
                    value = Priority.coerce(value, default=task.priority)
                elif key == "completed":
                    value = bool(value)
                setattr(task, key, value)

            if "order" not in changes and target_id == task.list_id:
                task.updated_at = now_iso()
                self.container.tasks.upsert(task)
                return task

            return self._move_task(task, target_id, changes.get("order"))

    def _move_task(self, task: Task, target_id: str, order: Optional[int]) -> Task:
        source_id = task.list_id
        source = [t for t in self._tasks_of(source_id) if t.id != task.id]
        if target_id == source_id:
            source.insert(clamp_index(order, len(source)), task)
            changed = renumber(source)
        else:
            task.list_id = target_id
            target = [t for t in self._tasks_of(target_id) if t.id != task.id]
            target.insert(clamp_index(order, len(target)), task)
            changed = renumber(source) + renumber(target)
        self.container.tasks.upsert_many(changed)
        moved = next(t for t in changed if t.id == task.id)
        logger.info("Moved task {} from {} to {} at order {}", task.id, source_id, target_id, moved.order)
        return moved

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        with self._lock:
            task = self._owned_task(owner_id, task_id)
            if task is None:
                return False
            self.container.tasks.delete(task_id)
            siblings = renumber(self._tasks_of(task.list_id))
            if siblings:
                self.container.tasks.upsert_many(siblings)
        logger.info("Deleted task {} from list {}", task_id, task.list_id)
        return True
