"""Drag gesture state machine driving the move planner.

Phases::

    idle --start--> dragging --over--> previewing --end--> committing --finish--> idle
                      |                   |
                      +-------end (cancel / no-op)-------> idle

Previews are always computed from the pre-drag baseline, never from the
previous preview, so repeated drag-over events for the same target are
idempotent and can be coalesced.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from loguru import logger

from ..domain.models import Task
from ..errors import InvalidTransition, ValidationError
from .planner import MovePlan, apply_move, plan_move
from .state import BoardState


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PREVIEWING = "previewing"
    COMMITTING = "committing"


class DragSession:
    """One drag gesture at a time over a :class:`BoardState`."""

    def __init__(self, state: BoardState) -> None:
        self._state = state
        self.phase = DragPhase.IDLE
        self.active_task: Optional[Task] = None
        self.source_list_id: Optional[str] = None
        self._last_over_id: Optional[str] = None
        self._preview_version = -1

    @property
    def active(self) -> bool:
        return self.phase != DragPhase.IDLE

    def _require(self, *phases: DragPhase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise InvalidTransition(f"Drag event not allowed in phase {self.phase.value} (expected {allowed})")

    def _require_active_task(self, active_id: str) -> None:
        if self.active_task is None or self.active_task.id != active_id:
            raise ValidationError(f"Task {active_id} is not being dragged")

    def start(self, task_id: str) -> Task:
        self._require(DragPhase.IDLE)
        task = self._state.get_task(task_id)
        if task is None:
            raise ValidationError(f"Unknown task {task_id}")
        if self._state.has_checkpoint:
            raise InvalidTransition("Another change is still being saved")
        self._state.checkpoint()
        self.active_task = task
        self.source_list_id = task.list_id
        self._last_over_id = None
        self.phase = DragPhase.DRAGGING
        logger.debug("Drag started: task={} list={}", task_id, task.list_id)
        return task

    def over(self, active_id: str, over_id: Optional[str]) -> bool:
        """Show a tentative placement.  Returns True when the board changed."""
        self._require(DragPhase.DRAGGING, DragPhase.PREVIEWING)
        self._require_active_task(active_id)
        if over_id is None:
            return False
        if over_id == self._last_over_id and self._state.version == self._preview_version:
            return False
        self._last_over_id = over_id
        self.phase = DragPhase.PREVIEWING

        baseline = self._state.baseline
        try:
            plan = plan_move(baseline, active_id, over_id)
            preview = baseline if plan is None else tuple(apply_move(baseline, plan))
        except ValidationError as exc:
            logger.debug("Ignoring drag-over on {}: {}", over_id, exc)
            return False
        if preview is self._state.lists:
            self._preview_version = self._state.version
            return False
        self._state.show(preview)
        self._preview_version = self._state.version
        return True

    def end(self, active_id: str, over_id: Optional[str]) -> Optional[MovePlan]:
        """Compute and apply the final placement.

        Returns the plan to persist, or None when the gesture was cancelled
        or dropped in place; in that case the pre-drag arrangement is
        restored and the session is idle again.
        """
        self._require(DragPhase.DRAGGING, DragPhase.PREVIEWING)
        self._require_active_task(active_id)
        if over_id is None:
            self.cancel()
            return None

        baseline = self._state.baseline
        try:
            plan = plan_move(baseline, active_id, over_id)
            if plan is not None:
                self._state.apply_move(plan, base=baseline)
        except ValidationError as exc:
            logger.info("Drop of {} on {} cancelled: {}", active_id, over_id, exc)
            self.cancel()
            return None
        if plan is None:
            self.cancel()
            return None

        self.phase = DragPhase.COMMITTING
        logger.debug("Drag committing: {}", plan.to_dict())
        return plan

    def cancel(self) -> None:
        """Discard any tentative placement and return to idle."""
        self._state.rollback()
        self._reset()

    def finish(self) -> None:
        """Leave the committing phase once persistence has resolved."""
        self._require(DragPhase.COMMITTING)
        self._reset()

    def _reset(self) -> None:
        self.phase = DragPhase.IDLE
        self.active_task = None
        self.source_list_id = None
        self._last_over_id = None
        self._preview_version = -1
