"""Tests for the drag gesture state machine."""

from __future__ import annotations

import pytest

from board_helpers import layout_of, make_board
from taskflow.domain.models import Task
from taskflow.engine.session import DragPhase, DragSession
from taskflow.engine.state import BoardState
from taskflow.errors import InvalidTransition, ValidationError


@pytest.fixture
def state() -> BoardState:
    return BoardState(make_board({"A": ["T1", "T2"], "B": ["T3"]}))


@pytest.fixture
def session(state: BoardState) -> DragSession:
    return DragSession(state)


def test_start_records_active_task(session: DragSession, state: BoardState) -> None:
    task = session.start("T1")
    assert task.id == "T1"
    assert session.phase == DragPhase.DRAGGING
    assert session.source_list_id == "A"
    assert state.has_checkpoint


def test_start_twice_is_rejected(session: DragSession) -> None:
    session.start("T1")
    with pytest.raises(InvalidTransition):
        session.start("T2")


def test_start_unknown_task(session: DragSession) -> None:
    with pytest.raises(ValidationError):
        session.start("missing")
    assert session.phase == DragPhase.IDLE


def test_over_before_start_is_rejected(session: DragSession) -> None:
    with pytest.raises(InvalidTransition):
        session.over("T1", "T3")


def test_preview_shows_tentative_placement(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    assert session.over("T1", "T3") is True
    assert session.phase == DragPhase.PREVIEWING
    assert layout_of(state.lists) == {"A": ["T2"], "B": ["T1", "T3"]}


def test_repeated_over_same_target_is_coalesced(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    version = state.version
    assert session.over("T1", "T3") is False
    assert state.version == version


def test_previews_are_computed_from_baseline(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    session.over("T1", "B")
    session.over("T1", "T3")
    assert layout_of(state.lists) == {"A": ["T2"], "B": ["T1", "T3"]}
    assert state.task_count() == 3


def test_hover_back_over_origin_restores_baseline(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    session.over("T1", "A")
    assert layout_of(state.lists) == {"A": ["T1", "T2"], "B": ["T3"]}


def test_over_unknown_target_is_ignored(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    assert session.over("T1", "ghost") is False
    assert layout_of(state.lists) == {"A": ["T1", "T2"], "B": ["T3"]}


def test_end_returns_plan_and_enters_committing(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    plan = session.end("T1", "T3")
    assert plan is not None and plan.target_list_id == "B"
    assert session.phase == DragPhase.COMMITTING
    assert layout_of(state.lists) == {"A": ["T2"], "B": ["T1", "T3"]}
    session.finish()
    assert session.phase == DragPhase.IDLE


def test_end_without_target_cancels(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    assert session.end("T1", None) is None
    assert session.phase == DragPhase.IDLE
    assert layout_of(state.lists) == {"A": ["T1", "T2"], "B": ["T3"]}
    assert not state.has_checkpoint


def test_drop_on_itself_is_noop(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    assert session.end("T1", "T1") is None
    assert session.phase == DragPhase.IDLE
    assert layout_of(state.lists) == {"A": ["T1", "T2"], "B": ["T3"]}


def test_end_with_mismatched_active_id(session: DragSession) -> None:
    session.start("T1")
    with pytest.raises(ValidationError):
        session.end("T2", "T3")


def test_finish_requires_committing(session: DragSession) -> None:
    with pytest.raises(InvalidTransition):
        session.finish()


def test_cancel_restores_and_allows_new_drag(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "B")
    session.cancel()
    assert layout_of(state.lists) == {"A": ["T1", "T2"], "B": ["T3"]}
    session.start("T2")
    assert session.phase == DragPhase.DRAGGING


def test_start_refused_while_another_change_is_pending(session: DragSession, state: BoardState) -> None:
    state.checkpoint()
    with pytest.raises(InvalidTransition):
        session.start("T1")
    assert session.phase == DragPhase.IDLE


def test_drop_on_list_deleted_mid_drag_cancels(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    state.remove_list("B")
    assert session.end("T1", "B") is None
    assert session.phase == DragPhase.IDLE
    assert layout_of(state.lists) == {"A": ["T1", "T2"]}
    assert not state.has_checkpoint


def test_repeated_over_recomputes_after_board_change(session: DragSession, state: BoardState) -> None:
    session.start("T1")
    session.over("T1", "T3")
    state.add_task(Task(id="T4", title="T4", order=2, list_id="A"))
    assert session.over("T1", "T3") is True
    assert layout_of(state.lists) == {"A": ["T2", "T4"], "B": ["T1", "T3"]}
