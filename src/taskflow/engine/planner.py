"""Move planner: where a dragged task lands and what that does to its lists.

A move is described by ``active_id`` (the dragged task) and ``over_id``
(the drop target), where ``over_id`` names either another task (insert at
its index) or a list (append to it).  Planning and applying are pure
functions over a sequence of :class:`TaskList`; callers own the state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from ..domain.models import TaskList
from ..errors import ValidationError
from .ordering import array_move, clamp_index, renumber


@dataclass(frozen=True)
class MovePlan:
    """Final placement of one task."""

    task_id: str
    source_list_id: str
    target_list_id: str
    from_index: int
    to_index: int

    @property
    def cross_list(self) -> bool:
        return self.source_list_id != self.target_list_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "source_list_id": self.source_list_id,
            "target_list_id": self.target_list_id,
            "from_index": self.from_index,
            "to_index": self.to_index,
            "cross_list": self.cross_list,
        }


def find_list(lists: Sequence[TaskList], list_id: str) -> Optional[int]:
    for idx, task_list in enumerate(lists):
        if task_list.id == list_id:
            return idx
    return None


def find_task(lists: Sequence[TaskList], task_id: str) -> Optional[tuple[int, int]]:
    """Return ``(list_index, task_index)`` of *task_id*, or None."""
    for list_idx, task_list in enumerate(lists):
        for task_idx, task in enumerate(task_list.tasks):
            if task.id == task_id:
                return list_idx, task_idx
    return None


def plan_move(lists: Sequence[TaskList], active_id: str, over_id: str) -> Optional[MovePlan]:
    """Compute the placement of *active_id* dropped on *over_id*.

    Returns None for drops that change nothing (a task onto itself, or a
    task onto its own list container).  Raises :class:`ValidationError` when
    either id is unknown.
    """
    if active_id == over_id:
        return None

    located = find_task(lists, active_id)
    if located is None:
        raise ValidationError(f"Unknown task {active_id}")
    source_idx, from_index = located
    source = lists[source_idx]

    over_list_idx = find_list(lists, over_id)
    if over_list_idx is not None:
        target = lists[over_list_idx]
        if target.id == source.id:
            return None
        to_index = len(target.tasks)
    else:
        over = find_task(lists, over_id)
        if over is None:
            raise ValidationError(f"Unknown drop target {over_id}")
        target_idx, to_index = over
        target = lists[target_idx]

    return MovePlan(
        task_id=active_id,
        source_list_id=source.id,
        target_list_id=target.id,
        from_index=from_index,
        to_index=to_index,
    )


def apply_move(lists: Sequence[TaskList], plan: MovePlan) -> list[TaskList]:
    """Return a new list collection with *plan* applied and renumbered.

    Only the affected lists are rebuilt; every other list object is reused.
    Raises :class:`ValidationError` when the plan no longer fits *lists*
    (task or a list vanished since the plan was made).
    """
    source_idx = find_list(lists, plan.source_list_id)
    target_idx = find_list(lists, plan.target_list_id)
    if source_idx is None or target_idx is None:
        raise ValidationError(f"List for move of {plan.task_id} no longer exists")
    source = lists[source_idx]
    target = lists[target_idx]

    from_index = plan.from_index
    if from_index >= len(source.tasks) or source.tasks[from_index].id != plan.task_id:
        ids = source.task_ids()
        if plan.task_id not in ids:
            raise ValidationError(f"Task {plan.task_id} is not in list {source.id}")
        from_index = ids.index(plan.task_id)

    out = list(lists)
    if not plan.cross_list:
        to_index = clamp_index(plan.to_index, len(source.tasks) - 1)
        tasks = array_move(source.tasks, from_index, to_index)
        out[source_idx] = replace(source, tasks=renumber(tasks))
        return out

    remaining = list(source.tasks)
    moved = remaining.pop(from_index)
    moved = replace(moved, list_id=target.id)
    inserted = list(target.tasks)
    inserted.insert(clamp_index(plan.to_index, len(inserted)), moved)
    out[source_idx] = replace(source, tasks=renumber(remaining))
    out[target_idx] = replace(target, tasks=renumber(inserted))
    return out


def move_list(lists: Sequence[TaskList], list_id: str, over_list_id: str) -> Optional[list[TaskList]]:
    """Reorder whole lists: *list_id* takes the index of *over_list_id*."""
    if list_id == over_list_id:
        return None
    from_index = find_list(lists, list_id)
    to_index = find_list(lists, over_list_id)
    if from_index is None or to_index is None:
        raise ValidationError(f"Unknown list {list_id if from_index is None else over_list_id}")
    return renumber(array_move(lists, from_index, to_index))
