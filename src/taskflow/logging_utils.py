"""Configure loguru and format engine objects for readable logs."""

from __future__ import annotations

import json
import sys
from typing import Any

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{line}</cyan> - "
    "{message}"
)


def configure_logging(level: str = "INFO") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)


def summarize_plan(plan: Any) -> str:
    """Render a move plan as a compact one-line description.

    Args:
        plan: A ``MovePlan`` (or None).

    Returns:
        ``"<task> <source>[i] -> <target>[j]"``, or ``"list reorder"`` for None.
    """
    if plan is None:
        return "list reorder"
    return (
        f"{plan.task_id} {plan.source_list_id}[{plan.from_index}] -> "
        f"{plan.target_list_id}[{plan.to_index}]"
    )


def summarize_board(lists: Any) -> dict[str, list[str]]:
    """Map each list id to its task ids in display order."""
    return {tl.id: [t.id for t in tl.tasks] for tl in lists}


def pretty(obj: Any, *, indent: int = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Args:
        obj: Object to serialize.
        indent: Indentation level for JSON output.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except (TypeError, ValueError):
        return str(obj)
