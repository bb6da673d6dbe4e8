"""Tests for board state checkpoints and mutations."""

from __future__ import annotations

from board_helpers import layout_of, make_board
from taskflow.domain.models import Task, TaskList
from taskflow.engine.planner import plan_move
from taskflow.engine.state import BoardState


def test_lists_are_normalized_on_load() -> None:
    lists = make_board({"A": ["T1"], "B": ["T2", "T3"]})
    lists.reverse()
    lists[0].tasks.reverse()
    state = BoardState(lists)
    assert [tl.id for tl in state.lists] == ["A", "B"]
    assert [t.id for t in state.get_list("B").tasks] == ["T2", "T3"]


def test_rollback_restores_checkpoint() -> None:
    state = BoardState(make_board({"A": ["T1", "T2"], "B": []}))
    state.checkpoint()
    state.apply_move(plan_move(state.lists, "T1", "B"))
    assert layout_of(state.lists) == {"A": ["T2"], "B": ["T1"]}
    assert state.rollback() is True
    assert layout_of(state.lists) == {"A": ["T1", "T2"], "B": []}
    assert state.rollback() is False


def test_commit_drops_checkpoint() -> None:
    state = BoardState(make_board({"A": ["T1", "T2"]}))
    state.checkpoint()
    state.apply_move(plan_move(state.lists, "T2", "T1"))
    state.commit()
    assert not state.has_checkpoint
    assert layout_of(state.lists) == {"A": ["T2", "T1"]}


def test_subscribers_see_every_change() -> None:
    state = BoardState(make_board({"A": ["T1"]}))
    seen = []
    unsubscribe = state.subscribe(lambda lists: seen.append(layout_of(lists)))
    state.add_task(Task(id="T2", title="T2", order=1, list_id="A"))
    unsubscribe()
    state.remove_task("T1")
    assert seen == [{"A": ["T1", "T2"]}]


def test_remove_task_renumbers_siblings() -> None:
    state = BoardState(make_board({"A": ["T1", "T2", "T3"]}))
    state.remove_task("T1")
    assert [(t.id, t.order) for t in state.get_list("A").tasks] == [("T2", 0), ("T3", 1)]


def test_remove_list_renumbers_lists() -> None:
    state = BoardState(make_board({"A": [], "B": [], "C": []}))
    assert state.remove_list("A")
    assert [(tl.id, tl.order) for tl in state.lists] == [("B", 0), ("C", 1)]
    assert not state.remove_list("A")


def test_add_task_to_unknown_list() -> None:
    state = BoardState()
    assert state.add_task(Task(id="T1", list_id="nope")) is False


def test_replace_moves_checkpoint_along() -> None:
    state = BoardState(make_board({"A": ["T1"]}))
    state.checkpoint()
    server = make_board({"A": ["T1"], "B": []})
    state.replace(server)
    state.rollback()
    assert layout_of(state.lists) == {"A": ["T1"], "B": []}


def test_adopt_task_keeps_local_placement() -> None:
    state = BoardState(make_board({"A": ["T1", "T2"]}))
    server_copy = Task(id="T2", title="renamed", order=7, list_id="elsewhere")
    assert state.adopt_task(server_copy)
    adopted = state.get_task("T2")
    assert adopted.title == "renamed"
    assert (adopted.order, adopted.list_id) == (1, "A")


def test_update_list_keeps_tasks() -> None:
    state = BoardState(make_board({"A": ["T1"]}))
    state.update_list(TaskList(id="A", title="Renamed", order=0))
    assert state.get_list("A").title == "Renamed"
    assert state.get_list("A").task_ids() == ["T1"]


def test_renumber_closes_gaps() -> None:
    lists = make_board({"A": ["T1", "T2"], "B": []})
    lists[0].tasks[1].order = 5
    lists[1].order = 9
    state = BoardState(lists)
    state.renumber()
    assert [tl.order for tl in state.lists] == [0, 1]
    assert [t.order for t in state.get_list("A").tasks] == [0, 1]


def test_crud_during_checkpoint_survives_rollback() -> None:
    state = BoardState(make_board({"A": ["T1", "T2"], "B": ["T3"], "C": []}))
    state.checkpoint()
    state.show(make_board({"A": ["T2"], "B": ["T1", "T3"], "C": []}))
    state.add_task(Task(id="T4", title="T4", order=1, list_id="A"))
    state.remove_list("C")
    state.remove_task("T3")
    state.update_list(TaskList(id="B", title="Renamed", order=1))
    state.rollback()
    assert layout_of(state.lists) == {"A": ["T1", "T2", "T4"], "B": []}
    assert state.get_list("B").title == "Renamed"


def test_adopt_task_reaches_checkpoint() -> None:
    state = BoardState(make_board({"A": ["T1", "T2"], "B": []}))
    state.checkpoint()
    state.show(make_board({"A": ["T2"], "B": ["T1"]}))
    assert state.adopt_task(Task(id="T1", title="renamed", order=0, list_id="B"))
    state.rollback()
    restored = state.get_task("T1")
    assert restored.title == "renamed"
    assert (restored.order, restored.list_id) == (0, "A")
