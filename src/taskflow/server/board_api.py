"""List and task endpoints.

Mounted under ``/api`` by :func:`taskflow.server.api.create_app`.  Every
route requires a bearer token and only ever sees the caller's own rows;
anything else is a 404.
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException

from ..domain.models import User
from ..service import BoardService
from .models import (
    CreateListRequest,
    CreateTaskRequest,
    ListOut,
    StatusResponse,
    TaskOut,
    UpdateListRequest,
    UpdateTaskRequest,
)


def create_board_router(service: BoardService, current_user: Callable[..., User]) -> APIRouter:
    """Create the lists/tasks router.

    Parameters
    ----------
    service:
        Board service backing every route.
    current_user:
        Dependency resolving the authenticated :class:`User`.
    """
    router = APIRouter(tags=["board"])

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    @router.get("/lists", response_model=list[ListOut])
    def list_lists(user: User = Depends(current_user)) -> list[ListOut]:
        return [ListOut.from_list(tl) for tl in service.get_lists(user.id)]

    @router.post("/lists", response_model=ListOut, status_code=201)
    def create_list(body: CreateListRequest, user: User = Depends(current_user)) -> ListOut:
        task_list = service.create_list(user.id, body.title.strip(), body.order)
        return ListOut.from_list(task_list)

    @router.patch("/lists/{list_id}", response_model=ListOut)
    def update_list(list_id: str, body: UpdateListRequest, user: User = Depends(current_user)) -> ListOut:
        task_list = service.update_list(user.id, list_id, body.model_dump(exclude_unset=True))
        if task_list is None:
            raise HTTPException(status_code=404, detail="List not found")
        return ListOut.from_list(task_list)

    @router.delete("/lists/{list_id}", response_model=StatusResponse)
    def delete_list(list_id: str, user: User = Depends(current_user)) -> StatusResponse:
        if not service.delete_list(user.id, list_id):
            raise HTTPException(status_code=404, detail="List not found")
        return StatusResponse(status="deleted")

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @router.post("/lists/{list_id}/tasks", response_model=TaskOut, status_code=201)
    def create_task(list_id: str, body: CreateTaskRequest, user: User = Depends(current_user)) -> TaskOut:
        task = service.create_task(
            user.id,
            list_id,
            title=body.title.strip(),
            description=body.description,
            order=body.order,
            priority=body.priority.value,
            deadline=body.deadline,
        )
        if task is None:
            raise HTTPException(status_code=404, detail="List not found")
        return TaskOut.from_task(task)

    @router.get("/tasks/{task_id}", response_model=TaskOut)
    def get_task(task_id: str, user: User = Depends(current_user)) -> TaskOut:
        task = service.get_task(user.id, task_id)
        if task is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return TaskOut.from_task(task)

    @router.patch("/tasks/{task_id}", response_model=TaskOut)
    def update_task(task_id: str, body: UpdateTaskRequest, user: User = Depends(current_user)) -> TaskOut:
        changes: dict[str, Any] = body.changes()
        task = service.update_task(user.id, task_id, changes)
        if task is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return TaskOut.from_task(task)

    @router.delete("/tasks/{task_id}", response_model=StatusResponse)
    def delete_task(task_id: str, user: User = Depends(current_user)) -> StatusResponse:
        if not service.delete_task(user.id, task_id):
            raise HTTPException(status_code=404, detail="Task not found")
        return StatusResponse(status="deleted")

    return router
