"""
Position ledger - integer ordering of tasks within a scheduled date.

The functions compute the adjustments an insert, move or gap-closing pass
needs; applying them is left to the caller. Ordering is best-effort: the
store does not enforce uniqueness, and ties keep the caller's sequence.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Protocol, Sequence

from organizese.utils.dates import DateLike, parse_iso_date


class Orderable(Protocol):
    id: str
    scheduled_date: date
    order: Optional[int]


@dataclass(frozen=True)
class OrderAdjustment:
    task_id: str
    old_order: int
    new_order: int


@dataclass
class ReorderResult:
    adjustments: List[OrderAdjustment] = field(default_factory=list)
    message: str = ""


def _order(task: Orderable) -> int:
    return task.order or 0


def _same_day(tasks: Iterable[Orderable], day: DateLike, exclude_task_id: Optional[str] = None) -> List[Orderable]:
    target = parse_iso_date(day)
    same_day = [
        t for t in tasks
        if parse_iso_date(t.scheduled_date) == target and t.id != exclude_task_id
    ]
    # sorted() is stable, so duplicated orders keep the incoming sequence
    return sorted(same_day, key=_order)


def next_available_order(tasks: Iterable[Orderable], day: DateLike) -> int:
    """One past the highest order on that date (1 for an empty date)"""
    orders = [_order(t) for t in _same_day(tasks, day)]
    return max(orders + [0]) + 1


def calculate_insert_reordering(
    tasks: Iterable[Orderable],
    day: DateLike,
    insert_position: int,
    exclude_task_id: Optional[str] = None,
) -> ReorderResult:
    """Shift every same-day task at or after insert_position by one to open a gap"""
    adjustments = [
        OrderAdjustment(task_id=t.id, old_order=_order(t), new_order=_order(t) + 1)
        for t in _same_day(tasks, day, exclude_task_id)
        if _order(t) >= insert_position
    ]

    if adjustments:
        old = ", ".join(str(a.old_order) for a in adjustments)
        new = ", ".join(str(a.new_order) for a in adjustments)
        message = f"Tasks at positions {old} will move to {new}"
    else:
        message = "No tasks will be reordered"

    return ReorderResult(adjustments=adjustments, message=message)


def calculate_move_reordering(
    tasks: Iterable[Orderable],
    day: DateLike,
    task_id: str,
    new_position: int,
) -> ReorderResult:
    """
    Adjustments for moving an existing task to new_position.

    Moving down (new > old) pulls tasks in (old, new] up by one; moving up
    pushes tasks in [new, old) down by one. The moving task itself is not in
    the list - the caller sets it to new_position.
    """
    same_day = _same_day(tasks, day)
    moving = next((t for t in same_day if t.id == task_id), None)
    if moving is None:
        return ReorderResult(adjustments=[], message="Task not found")

    old_position = _order(moving)
    others = [t for t in same_day if t.id != task_id]
    adjustments: List[OrderAdjustment] = []

    if new_position > old_position:
        for t in others:
            if old_position < _order(t) <= new_position:
                adjustments.append(OrderAdjustment(t.id, _order(t), _order(t) - 1))
    elif new_position < old_position:
        for t in others:
            if new_position <= _order(t) < old_position:
                adjustments.append(OrderAdjustment(t.id, _order(t), _order(t) + 1))

    message = f"Moving task from position {old_position} to {new_position}"
    if adjustments:
        message += f". {len(adjustments)} tasks reordered."

    return ReorderResult(adjustments=adjustments, message=message)


def normalize_task_sequence(tasks: Iterable[Orderable], day: DateLike) -> List[OrderAdjustment]:
    """Dense 1..N renumbering of a date, returning only the orders that change"""
    adjustments = []
    for index, t in enumerate(_same_day(tasks, day)):
        expected = index + 1
        if _order(t) != expected:
            adjustments.append(OrderAdjustment(t.id, _order(t), expected))
    return adjustments


def apply_adjustments(tasks: Sequence[Orderable], adjustments: Iterable[OrderAdjustment]) -> int:
    """Write new orders onto in-memory tasks; returns how many were touched"""
    by_id = {t.id: t for t in tasks}
    applied = 0
    for adj in adjustments:
        task = by_id.get(adj.task_id)
        if task is not None:
            task.order = adj.new_order
            applied += 1
    return applied
