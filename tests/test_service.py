"""Tests for the server-side board service."""

from __future__ import annotations

from pathlib import Path

import pytest

from taskflow.domain.models import Priority
from taskflow.engine.ordering import is_contiguous
from taskflow.service import BoardService
from taskflow.storage import StorageContainer


@pytest.fixture
def service(tmp_path: Path) -> BoardService:
    return BoardService(StorageContainer(tmp_path / "data"))


def _titles(service: BoardService, owner: str) -> dict[str, list[str]]:
    return {tl.title: [t.title for t in tl.tasks] for tl in service.get_lists(owner)}


def test_create_list_inserts_and_renumbers(service: BoardService) -> None:
    service.create_list("u1", "B")
    service.create_list("u1", "A", order=0)
    service.create_list("u1", "Z", order=99)
    lists = service.get_lists("u1")
    assert [(tl.title, tl.order) for tl in lists] == [("A", 0), ("B", 1), ("Z", 2)]


def test_lists_are_scoped_to_owner(service: BoardService) -> None:
    mine = service.create_list("u1", "Mine")
    service.create_list("u2", "Theirs")
    assert [tl.title for tl in service.get_lists("u1")] == ["Mine"]
    assert service.update_list("u2", mine.id, {"title": "stolen"}) is None
    assert service.delete_list("u2", mine.id) is False
    assert service.create_task("u2", mine.id, "x") is None


def test_create_task_defaults(service: BoardService) -> None:
    tl = service.create_list("u1", "A")
    task = service.create_task("u1", tl.id, "T1", description="", priority=None)
    assert task.priority == Priority.MEDIUM
    assert task.description is None
    assert task.order == 0


def test_update_task_fields_only(service: BoardService) -> None:
    tl = service.create_list("u1", "A")
    service.create_task("u1", tl.id, "T1")
    t2 = service.create_task("u1", tl.id, "T2")
    updated = service.update_task("u1", t2.id, {"title": "Two", "priority": "high", "completed": 1})
    assert (updated.title, updated.priority, updated.completed, updated.order) == ("Two", Priority.HIGH, True, 1)


def test_move_within_list(service: BoardService) -> None:
    tl = service.create_list("u1", "A")
    tasks = [service.create_task("u1", tl.id, name) for name in ("T1", "T2", "T3")]
    moved = service.update_task("u1", tasks[0].id, {"order": 2})
    assert moved.order == 2
    assert _titles(service, "u1") == {"A": ["T2", "T3", "T1"]}


def test_move_across_lists_renumbers_both(service: BoardService) -> None:
    a = service.create_list("u1", "A")
    b = service.create_list("u1", "B")
    t1 = service.create_task("u1", a.id, "T1")
    service.create_task("u1", a.id, "T2")
    service.create_task("u1", b.id, "T3")
    moved = service.update_task("u1", t1.id, {"list_id": b.id, "order": 0})
    assert (moved.list_id, moved.order) == (b.id, 0)
    assert _titles(service, "u1") == {"A": ["T2"], "B": ["T1", "T3"]}
    assert all(is_contiguous(tl.tasks) for tl in service.get_lists("u1"))


def test_move_to_foreign_list_is_refused(service: BoardService) -> None:
    a = service.create_list("u1", "A")
    foreign = service.create_list("u2", "X")
    t1 = service.create_task("u1", a.id, "T1")
    assert service.update_task("u1", t1.id, {"list_id": foreign.id}) is None
    assert service.get_task("u1", t1.id).list_id == a.id


def test_delete_list_removes_its_tasks(service: BoardService) -> None:
    a = service.create_list("u1", "A")
    service.create_list("u1", "B")
    t1 = service.create_task("u1", a.id, "T1")
    assert service.delete_list("u1", a.id)
    assert service.get_task("u1", t1.id) is None
    assert [(tl.title, tl.order) for tl in service.get_lists("u1")] == [("B", 0)]


def test_delete_task_renumbers_siblings(service: BoardService) -> None:
    tl = service.create_list("u1", "A")
    tasks = [service.create_task("u1", tl.id, name) for name in ("T1", "T2", "T3")]
    assert service.delete_task("u1", tasks[1].id)
    assert [(t.title, t.order) for t in service.get_lists("u1")[0].tasks] == [("T1", 0), ("T3", 1)]
    assert service.delete_task("u1", tasks[1].id) is False
