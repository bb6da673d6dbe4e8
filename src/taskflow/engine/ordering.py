"""Order model: how list and task order is represented and renormalized.

An ordered entity is anything with ``id`` and ``order`` attributes (both
:class:`~taskflow.domain.models.TaskList` and
:class:`~taskflow.domain.models.Task` qualify).  Display order is
``(order, id)`` ascending, so ties are resolved by a stable secondary sort on
the identifier.  After any structural change the affected sequence is
renumbered to the contiguous range ``0..n-1``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Protocol, Sequence, TypeVar


class Ordered(Protocol):
    id: str
    order: int


T = TypeVar("T", bound=Ordered)


def sort_by_order(items: Iterable[T]) -> list[T]:
    """Return *items* in display order (``order`` then ``id``)."""
    return sorted(items, key=lambda item: (item.order, item.id))


def renumber(sequence: Sequence[T]) -> list[T]:
    """Reassign ``order = index`` over *sequence*, keeping its arrangement.

    Pure: elements whose order is already correct are returned as-is, the
    others are shallow copies with only ``order`` changed.  Idempotent.
    """
    out: list[T] = []
    for idx, item in enumerate(sequence):
        out.append(item if item.order == idx else replace(item, order=idx))
    return out


def is_contiguous(sequence: Sequence[Ordered]) -> bool:
    """True when the orders of *sequence* are exactly ``0..n-1`` in place."""
    return all(item.order == idx for idx, item in enumerate(sequence))


def next_order(sequence: Sequence[Ordered]) -> int:
    """Order value for an entity appended at the end of *sequence*."""
    return len(sequence)


def array_move(sequence: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Remove the element at *from_index* and reinsert it at *to_index*."""
    items = list(sequence)
    item = items.pop(from_index)
    items.insert(to_index, item)
    return items


def clamp_index(index: int | None, length: int) -> int:
    """Clamp a requested insertion index into ``0..length`` (None appends)."""
    if index is None:
        return length
    return max(0, min(int(index), length))
