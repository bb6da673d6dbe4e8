"""Client-side board session.

:class:`BoardController` owns the board state for one signed-in user and
exposes what a UI needs: CRUD helpers that keep local state in step with the
server, and the three drag handlers (``drag_start``, ``drag_over``,
``drag_end``) that run the move planner and the reconciler.  Every state
change is pushed to subscribers.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from loguru import logger

from ..constants import (
    MSG_FETCH_FAILED,
    MSG_LIST_CREATE_FAILED,
    MSG_LIST_CREATED,
    MSG_LIST_DELETE_FAILED,
    MSG_LIST_DELETED,
    MSG_SESSION_EXPIRED,
    MSG_TASK_CREATE_FAILED,
    MSG_TASK_CREATED,
    MSG_TASK_DELETE_FAILED,
    MSG_TASK_DELETED,
    MSG_TASK_UPDATE_FAILED,
)
from ..domain.models import Priority, Task, TaskList
from ..engine.ordering import next_order
from ..engine.planner import move_list
from ..engine.reconcile import ReconcileOutcome, Reconciler
from ..engine.session import DragSession
from ..engine.state import BoardState
from ..errors import AuthenticationError, InvalidTransition, TaskflowError
from ..notifications import Notifier
from .api import StorageGateway

# snake_case edit names that differ on the wire
_WIRE_KEYS = {"list_id": "listId"}


class BoardController:
    def __init__(self, gateway: StorageGateway, notifier: Optional[Notifier] = None) -> None:
        self.gateway = gateway
        self.notifier = notifier or Notifier()
        self.state = BoardState()
        self.session = DragSession(self.state)
        self.reconciler = Reconciler(self.state, gateway, self.notifier)
        self.is_loading = False

    @property
    def lists(self) -> tuple[TaskList, ...]:
        return self.state.lists

    def subscribe(self, listener: Callable[[tuple[TaskList, ...]], None]) -> Callable[[], None]:
        return self.state.subscribe(listener)

    def _fail(self, exc: TaskflowError, message: str) -> None:
        logger.warning("{}: {}", message, exc)
        self.notifier.error(MSG_SESSION_EXPIRED if isinstance(exc, AuthenticationError) else message)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    async def fetch_lists(self) -> bool:
        try:
            lists = await self.gateway.fetch_lists()
        except TaskflowError as exc:
            self._fail(exc, MSG_FETCH_FAILED)
            return False
        self.state.replace(lists)
        return True

    async def add_list(self, title: str) -> Optional[TaskList]:
        try:
            created = await self.gateway.create_list(title, next_order(self.state.lists))
        except TaskflowError as exc:
            self._fail(exc, MSG_LIST_CREATE_FAILED)
            return None
        self.state.add_list(created)
        self.notifier.success(MSG_LIST_CREATED)
        return created

    async def delete_list(self, list_id: str) -> bool:
        try:
            await self.gateway.delete_list(list_id)
        except TaskflowError as exc:
            self._fail(exc, MSG_LIST_DELETE_FAILED)
            return False
        self.state.remove_list(list_id)
        self.notifier.success(MSG_LIST_DELETED)
        return True

    async def move_list(self, list_id: str, over_list_id: str) -> Optional[ReconcileOutcome]:
        """Reorder lists optimistically, then persist the moved list's order."""
        if self.session.active:
            raise InvalidTransition("Cannot reorder lists while a task is being dragged")
        if self.state.has_checkpoint:
            raise InvalidTransition("Another change is still being saved")
        reordered = move_list(self.state.lists, list_id, over_list_id)
        if reordered is None:
            return None
        self.state.checkpoint()
        self.state.show(reordered)
        return await self.reconciler.persist_list_order(list_id)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def add_task(
        self,
        list_id: str,
        title: str,
        priority: str | Priority = Priority.MEDIUM,
        deadline: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Task]:
        task_list = self.state.get_list(list_id)
        payload: dict[str, Any] = {
            "title": title,
            "order": next_order(task_list.tasks) if task_list else 0,
            "priority": Priority.coerce(priority).value,
        }
        if deadline:
            payload["deadline"] = deadline
        if description:
            payload["description"] = description
        try:
            created = await self.gateway.create_task(list_id, payload)
        except TaskflowError as exc:
            self._fail(exc, MSG_TASK_CREATE_FAILED)
            return None
        self.state.add_task(created)
        self.notifier.success(MSG_TASK_CREATED)
        return created

    async def update_task(self, task_id: str, **changes: Any) -> Optional[Task]:
        """Edit a task.  Placement changes (``list_id``/``order``) refetch afterwards."""
        payload = {_WIRE_KEYS.get(key, key): value for key, value in changes.items()}
        if isinstance(payload.get("priority"), Priority):
            payload["priority"] = payload["priority"].value
        self.is_loading = True
        try:
            updated = await self.gateway.update_task(task_id, payload)
        except TaskflowError as exc:
            self._fail(exc, MSG_TASK_UPDATE_FAILED)
            if not isinstance(exc, AuthenticationError):
                await self.reconciler.resync(notify=False)
            return None
        else:
            if "list_id" in changes or "order" in changes:
                await self.reconciler.resync()
            else:
                self.state.adopt_task(updated, keep_order=True)
            return updated
        finally:
            self.is_loading = False

    async def toggle_completed(self, task_id: str) -> Optional[Task]:
        task = self.state.get_task(task_id)
        if task is None:
            return None
        return await self.update_task(task_id, completed=not task.completed)

    async def delete_task(self, task_id: str) -> bool:
        self.is_loading = True
        try:
            await self.gateway.delete_task(task_id)
        except TaskflowError as exc:
            self._fail(exc, MSG_TASK_DELETE_FAILED)
            return False
        finally:
            self.is_loading = False
        self.state.remove_task(task_id)
        self.notifier.success(MSG_TASK_DELETED)
        return True

    # ------------------------------------------------------------------
    # Drag and drop
    # ------------------------------------------------------------------

    def drag_start(self, task_id: str) -> Task:
        return self.session.start(task_id)

    def drag_over(self, active_id: str, over_id: Optional[str]) -> bool:
        return self.session.over(active_id, over_id)

    async def drag_end(self, active_id: str, over_id: Optional[str]) -> Optional[ReconcileOutcome]:
        """Finish the gesture.  None means cancelled or dropped in place."""
        plan = self.session.end(active_id, over_id)
        if plan is None:
            return None
        self.is_loading = True
        try:
            return await self.reconciler.persist_move(plan)
        finally:
            self.is_loading = False
            self.session.finish()

    def drag_cancel(self) -> None:
        if self.session.active:
            self.session.cancel()
