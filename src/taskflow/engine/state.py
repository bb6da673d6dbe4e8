"""Explicitly owned board state with a narrow mutation API.

:class:`BoardState` holds the user's lists (each embedding its tasks) as an
immutable tuple that is swapped on every change.  A *checkpoint* records the
last arrangement known to match the server; optimistic changes are made on
top of it and later either committed (checkpoint dropped) or rolled back.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Optional

from loguru import logger

from ..domain.models import Task, TaskList
from .ordering import renumber, sort_by_order
from .planner import MovePlan, apply_move, find_list, find_task

Listener = Callable[[tuple[TaskList, ...]], None]


def normalize(lists: Iterable[TaskList]) -> tuple[TaskList, ...]:
    """Sort lists and their tasks into display order."""
    return tuple(replace(tl, tasks=sort_by_order(tl.tasks)) for tl in sort_by_order(lists))


class BoardState:
    def __init__(self, lists: Iterable[TaskList] = ()) -> None:
        self._lists: tuple[TaskList, ...] = normalize(lists)
        self._checkpoint: Optional[tuple[TaskList, ...]] = None
        self._listeners: list[Listener] = []
        self.version = 0

    # -- reads --------------------------------------------------------------

    @property
    def lists(self) -> tuple[TaskList, ...]:
        return self._lists

    @property
    def baseline(self) -> tuple[TaskList, ...]:
        """The checkpoint when one is held, otherwise the current lists."""
        return self._checkpoint if self._checkpoint is not None else self._lists

    @property
    def has_checkpoint(self) -> bool:
        return self._checkpoint is not None

    def get_list(self, list_id: str) -> Optional[TaskList]:
        idx = find_list(self._lists, list_id)
        return self._lists[idx] if idx is not None else None

    def get_task(self, task_id: str) -> Optional[Task]:
        located = find_task(self._lists, task_id)
        if located is None:
            return None
        list_idx, task_idx = located
        return self._lists[list_idx].tasks[task_idx]

    def task_count(self) -> int:
        return sum(len(tl.tasks) for tl in self._lists)

    # -- subscriptions --------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the lists after every change."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, lists: Iterable[TaskList]) -> None:
        self._lists = tuple(lists)
        self.version += 1
        for listener in list(self._listeners):
            listener(self._lists)

    # -- mutations ------------------------------------------------------------

    def checkpoint(self) -> None:
        self._checkpoint = self._lists

    def commit(self) -> None:
        """Accept the current arrangement as server-confirmed."""
        self._checkpoint = None

    def rollback(self) -> bool:
        """Restore the checkpoint.  Returns False when none is held."""
        if self._checkpoint is None:
            return False
        restored = self._checkpoint
        self._checkpoint = None
        if restored is not self._lists:
            logger.debug("Rolling back board state to checkpoint")
            self._set(restored)
        return True

    def show(self, lists: Iterable[TaskList]) -> None:
        """Display a tentative arrangement; the checkpoint is left alone."""
        self._set(lists)

    def apply_move(self, plan: MovePlan, *, base: Optional[Iterable[TaskList]] = None) -> None:
        source = tuple(base) if base is not None else self._lists
        self._set(apply_move(source, plan))

    def renumber(self) -> None:
        """Renumber lists and every list's tasks to contiguous orders."""
        lists = [replace(tl, tasks=renumber(tl.tasks)) for tl in renumber(self._lists)]
        self._set(lists)

    def replace(self, lists: Iterable[TaskList]) -> None:
        """Adopt server truth.  A held checkpoint moves along with it."""
        normalized = normalize(lists)
        if self._checkpoint is not None:
            self._checkpoint = normalized
        self._set(normalized)

    def _mutate(self, change: Callable[[tuple[TaskList, ...]], Optional[list[TaskList]]]) -> bool:
        """Apply a server-confirmed *change* to the lists and any held checkpoint.

        *change* returns None when it does not apply.  The checkpoint is
        updated independently so a rollback keeps the change.
        """
        updated = change(self._lists)
        if self._checkpoint is not None:
            restored = change(self._checkpoint)
            if restored is not None:
                self._checkpoint = tuple(restored)
        if updated is None:
            return False
        self._set(updated)
        return True

    def add_list(self, task_list: TaskList) -> None:
        self._mutate(lambda lists: [*lists, task_list])

    def remove_list(self, list_id: str) -> bool:
        def _remove(lists: tuple[TaskList, ...]) -> Optional[list[TaskList]]:
            keep = [tl for tl in lists if tl.id != list_id]
            return renumber(keep) if len(keep) != len(lists) else None

        return self._mutate(_remove)

    def update_list(self, task_list: TaskList) -> bool:
        def _update(lists: tuple[TaskList, ...]) -> Optional[list[TaskList]]:
            idx = find_list(lists, task_list.id)
            if idx is None:
                return None
            updated = list(lists)
            updated[idx] = replace(task_list, tasks=lists[idx].tasks)
            return updated

        return self._mutate(_update)

    def add_task(self, task: Task) -> bool:
        def _add(lists: tuple[TaskList, ...]) -> Optional[list[TaskList]]:
            idx = find_list(lists, task.list_id)
            if idx is None:
                return None
            updated = list(lists)
            updated[idx] = replace(lists[idx], tasks=lists[idx].tasks + [task])
            return updated

        return self._mutate(_add)

    def remove_task(self, task_id: str) -> bool:
        def _remove(lists: tuple[TaskList, ...]) -> Optional[list[TaskList]]:
            located = find_task(lists, task_id)
            if located is None:
                return None
            list_idx, task_idx = located
            updated = list(lists)
            tasks = list(lists[list_idx].tasks)
            tasks.pop(task_idx)
            updated[list_idx] = replace(lists[list_idx], tasks=renumber(tasks))
            return updated

        return self._mutate(_remove)

    def adopt_task(self, task: Task, *, keep_order: bool = True) -> bool:
        """Overwrite a task's fields with the server copy, in place.

        With *keep_order* the locally applied ``order`` and ``list_id`` stay,
        in the current lists and in the checkpoint alike.
        """

        def _adopt(lists: tuple[TaskList, ...]) -> Optional[list[TaskList]]:
            located = find_task(lists, task.id)
            if located is None:
                return None
            list_idx, task_idx = located
            adopted = task
            if keep_order:
                current = lists[list_idx].tasks[task_idx]
                adopted = replace(task, order=current.order, list_id=current.list_id)
            updated = list(lists)
            tasks = list(lists[list_idx].tasks)
            tasks[task_idx] = adopted
            updated[list_idx] = replace(lists[list_idx], tasks=tasks)
            return updated

        return self._mutate(_adopt)
