"""Reconciliation of optimistic moves with the server.

The move is already applied locally when :meth:`Reconciler.persist_move`
runs.  It issues exactly one persistence request and then:

* success, same list: adopt the returned task and keep local orders;
* success, different list: adopt, then refetch every list, because a
  single-row response cannot describe the renumbering of two lists;
* success with a disagreeing ``order``: refetch;
* any failure: notify once, refetch (or roll back if the refetch fails too);
* authentication failure: roll back locally, notify once, no refetch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from loguru import logger

from ..constants import MSG_FETCH_FAILED, MSG_LIST_MOVE_FAILED, MSG_SESSION_EXPIRED, MSG_TASK_MOVE_FAILED
from ..domain.models import Task
from ..errors import AuthenticationError, ConsistencyMismatch, TaskflowError, ValidationError
from ..logging_utils import pretty, summarize_board, summarize_plan
from ..notifications import Notifier
from .planner import MovePlan
from .state import BoardState

if TYPE_CHECKING:
    from ..client.api import StorageGateway


class ReconcileStatus(str, Enum):
    COMMITTED = "committed"
    RESYNCED = "resynced"
    FAILED = "failed"
    UNAUTHENTICATED = "unauthenticated"


@dataclass
class ReconcileOutcome:
    status: ReconcileStatus
    plan: Optional[MovePlan] = None
    task: Optional[Task] = None
    error: Optional[TaskflowError] = None

    @property
    def ok(self) -> bool:
        return self.status in (ReconcileStatus.COMMITTED, ReconcileStatus.RESYNCED)


class Reconciler:
    def __init__(self, state: BoardState, gateway: "StorageGateway", notifier: Notifier) -> None:
        self._state = state
        self._gateway = gateway
        self._notifier = notifier

    async def persist_move(self, plan: MovePlan) -> ReconcileOutcome:
        moved = self._state.get_task(plan.task_id)
        if moved is None:
            return await self._fail(plan, ValidationError(f"Task {plan.task_id} vanished before commit"))

        changes: dict[str, object] = {"order": moved.order}
        if plan.cross_list:
            changes["listId"] = plan.target_list_id

        try:
            returned = await self._gateway.update_task(plan.task_id, changes)
        except AuthenticationError as exc:
            return self._unauthenticated(plan, exc)
        except TaskflowError as exc:
            return await self._fail(plan, exc)

        if returned.list_id != plan.target_list_id:
            mismatch = ConsistencyMismatch(
                f"Task {plan.task_id} reported in list {returned.list_id}, expected {plan.target_list_id}"
            )
            return await self._fail(plan, mismatch)

        in_sync = returned.order == moved.order
        self._state.adopt_task(returned, keep_order=True)
        self._state.commit()
        logger.info("Move committed: {}", summarize_plan(plan))

        if not in_sync:
            logger.warning(
                "Server order {} differs from local order {} for {}; resyncing",
                returned.order,
                moved.order,
                plan.task_id,
            )
        if plan.cross_list or not in_sync:
            await self.resync()
            return ReconcileOutcome(ReconcileStatus.RESYNCED, plan=plan, task=returned)
        return ReconcileOutcome(ReconcileStatus.COMMITTED, plan=plan, task=returned)

    async def persist_list_order(self, list_id: str) -> ReconcileOutcome:
        """Persist a locally applied list reorder (lists are renumbered server side)."""
        task_list = self._state.get_list(list_id)
        if task_list is None:
            return await self._fail(None, ValidationError(f"List {list_id} vanished before commit"), MSG_LIST_MOVE_FAILED)
        try:
            returned = await self._gateway.update_list(list_id, {"order": task_list.order})
        except AuthenticationError as exc:
            return self._unauthenticated(None, exc)
        except TaskflowError as exc:
            return await self._fail(None, exc, MSG_LIST_MOVE_FAILED)

        self._state.commit()
        if returned.order != task_list.order:
            await self.resync()
            return ReconcileOutcome(ReconcileStatus.RESYNCED)
        return ReconcileOutcome(ReconcileStatus.COMMITTED)

    async def resync(self, *, notify: bool = True) -> bool:
        """Refetch all lists and adopt them as the new truth.

        If the refetch fails, a held checkpoint is restored instead.
        """
        try:
            lists = await self._gateway.fetch_lists()
        except TaskflowError as exc:
            logger.error("Resync failed: {}", exc)
            self._state.rollback()
            if notify:
                self._notifier.error(MSG_FETCH_FAILED)
            return False
        self._state.replace(lists)
        self._state.commit()
        logger.info("Resynced {} lists from server", len(lists))
        logger.debug("Board after resync:\n{}", pretty(summarize_board(self._state.lists)))
        return True

    async def _fail(
        self,
        plan: Optional[MovePlan],
        exc: TaskflowError,
        message: str = MSG_TASK_MOVE_FAILED,
    ) -> ReconcileOutcome:
        logger.warning("Persisting {} failed ({}): {}", summarize_plan(plan), type(exc).__name__, exc)
        self._notifier.error(message)
        await self.resync(notify=False)
        return ReconcileOutcome(ReconcileStatus.FAILED, plan=plan, error=exc)

    def _unauthenticated(self, plan: Optional[MovePlan], exc: AuthenticationError) -> ReconcileOutcome:
        logger.warning("Persisting {} rejected: not authenticated", summarize_plan(plan))
        self._state.rollback()
        self._notifier.error(MSG_SESSION_EXPIRED)
        return ReconcileOutcome(ReconcileStatus.UNAUTHENTICATED, plan=plan, error=exc)
