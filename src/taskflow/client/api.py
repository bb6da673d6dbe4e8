"""Storage gateway: the client's view of the REST API.

:class:`StorageGateway` is the interface the board controller and the
reconciler depend on.  :class:`TaskflowClient` implements it over HTTP with
``httpx`` and maps every failure onto the shared error taxonomy, so callers
never see transport-level exceptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Mapping, Optional

import httpx
from loguru import logger

from ..constants import API_PREFIX
from ..domain.models import Task, TaskList
from ..errors import AuthenticationError, NetworkError, NotFoundError, TaskflowError, ValidationError


class StorageGateway(ABC):
    @abstractmethod
    async def fetch_lists(self) -> list[TaskList]:
        raise NotImplementedError

    @abstractmethod
    async def create_list(self, title: str, order: int) -> TaskList:
        raise NotImplementedError

    @abstractmethod
    async def update_list(self, list_id: str, changes: Mapping[str, Any]) -> TaskList:
        raise NotImplementedError

    @abstractmethod
    async def delete_list(self, list_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def create_task(self, list_id: str, payload: Mapping[str, Any]) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def update_task(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        raise NotImplementedError


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if detail is not None:
            return str(detail)
    return str(body)


def raise_for_status(response: httpx.Response) -> None:
    """Translate an error response into a :class:`TaskflowError`."""
    status = response.status_code
    if status < 400:
        return
    detail = _error_detail(response)
    if status in (401, 403):
        raise AuthenticationError(detail, status_code=status)
    if status == 404:
        raise NotFoundError(detail, status_code=status)
    if status in (400, 409, 422):
        raise ValidationError(detail, status_code=status)
    raise NetworkError(f"Server error {status}: {detail}", status_code=status)


class TaskflowClient(StorageGateway):
    """Async REST client for a Taskflow server.

    Usage::

        async with TaskflowClient("http://127.0.0.1:8000", token=token) as client:
            lists = await client.fetch_lists()
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        self.token = token

    async def __aenter__(self) -> "TaskflowClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._http.request(method, f"{API_PREFIX}{path}", json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("{} {} failed: {}", method, path, exc)
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc
        raise_for_status(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(f"Invalid JSON from {method} {path}") from exc

    # -- auth -----------------------------------------------------------------

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/auth/register", {"name": name, "email": email, "password": password})
        self.token = data["token"]
        return data

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/auth/login", {"email": email, "password": password})
        self.token = data["token"]
        return data

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/auth/me")

    # -- lists ----------------------------------------------------------------

    async def fetch_lists(self) -> list[TaskList]:
        data = await self._request("GET", "/lists")
        if not isinstance(data, list):
            raise TaskflowError("Unexpected /lists payload")
        return [TaskList.from_dict(item) for item in data]

    async def create_list(self, title: str, order: int) -> TaskList:
        data = await self._request("POST", "/lists", {"title": title, "order": order})
        return TaskList.from_dict(data)

    async def update_list(self, list_id: str, changes: Mapping[str, Any]) -> TaskList:
        data = await self._request("PATCH", f"/lists/{list_id}", dict(changes))
        return TaskList.from_dict(data)

    async def delete_list(self, list_id: str) -> None:
        await self._request("DELETE", f"/lists/{list_id}")

    # -- tasks ----------------------------------------------------------------

    async def create_task(self, list_id: str, payload: Mapping[str, Any]) -> Task:
        data = await self._request("POST", f"/lists/{list_id}/tasks", dict(payload))
        return Task.from_dict(data)

    async def update_task(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        data = await self._request("PATCH", f"/tasks/{task_id}", dict(changes))
        return Task.from_dict(data)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")
