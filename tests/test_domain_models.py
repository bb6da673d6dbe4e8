"""Tests for domain record serialization."""

from __future__ import annotations

from taskflow.domain.models import Priority, Task, TaskList, User


def test_task_from_camel_case_payload() -> None:
    task = Task.from_dict(
        {
            "id": "T1",
            "title": "Write",
            "listId": "A",
            "order": 3,
            "priority": "HIGH",
            "deadline": "",
            "createdAt": "2026-01-01T00:00:00+00:00",
        }
    )
    assert task.list_id == "A"
    assert task.priority == Priority.HIGH
    assert task.deadline is None
    assert task.created_at == "2026-01-01T00:00:00+00:00"


def test_priority_coerce_falls_back() -> None:
    assert Priority.coerce("bogus") == Priority.MEDIUM
    assert Priority.coerce("bogus", default=Priority.LOW) == Priority.LOW
    assert Priority.coerce(Priority.HIGH) is Priority.HIGH


def test_task_list_round_trip_with_tasks() -> None:
    tl = TaskList(id="A", title="A", owner_id="u1", tasks=[Task(id="T1", list_id="A")])
    data = tl.to_dict(include_tasks=True)
    assert data["tasks"][0]["list_id"] == "A"
    assert TaskList.from_dict(data).task_ids() == ["T1"]
    assert "tasks" not in tl.to_dict()


def test_user_public_dict_hides_hash() -> None:
    user = User(id="u1", name="Alice", email="a@example.com", password_hash="secret-hash")
    assert user.public_dict() == {"id": "u1", "name": "Alice", "email": "a@example.com"}
    assert User.from_dict(user.to_dict()).password_hash == "secret-hash"


def test_generated_ids_are_unique() -> None:
    assert Task().id != Task().id
    assert TaskList().id.startswith("list-")
