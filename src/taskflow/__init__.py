"""Provide the public `taskflow` package exports."""

from __future__ import annotations

from .client import BoardController, TaskflowClient
from .engine.ordering import renumber
from .engine.planner import MovePlan, plan_move
from .engine.reconcile import ReconcileOutcome, Reconciler
from .engine.session import DragPhase, DragSession
from .engine.state import BoardState

__all__ = [
    "BoardController",
    "BoardState",
    "DragPhase",
    "DragSession",
    "MovePlan",
    "ReconcileOutcome",
    "Reconciler",
    "TaskflowClient",
    "plan_move",
    "renumber",
]
