"""
In-memory task filtering used by the task list endpoint
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from organizese.models.task import TaskStatus
from organizese.services.history import completion_entries


@dataclass
class TaskFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    types: List[str] = field(default_factory=list)
    priorities: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)
    assigned_person_id: Optional[str] = None
    time_investments: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    has_checklist: Optional[bool] = None
    is_forwarded: Optional[bool] = None
    no_order: Optional[bool] = None
    is_processed: Optional[bool] = None


def _value(v) -> str:
    return getattr(v, "value", v)


def _matches(task, f: TaskFilter) -> bool:
    if f.start_date and task.scheduled_date < f.start_date:
        return False
    if f.end_date and task.scheduled_date > f.end_date:
        return False

    if f.types and _value(task.type) not in f.types:
        return False
    if f.priorities and _value(task.priority) not in f.priorities:
        return False

    if f.statuses:
        # "not-done" means "was ever marked not done", other statuses use the live field
        if TaskStatus.NOT_DONE.value in f.statuses:
            if not any(c.status == TaskStatus.NOT_DONE.value for c in completion_entries(task)):
                return False
        elif _value(task.status) not in f.statuses:
            return False

    if f.assigned_person_id and task.assigned_person_id != f.assigned_person_id:
        return False
    if f.time_investments and _value(task.time_investment) not in f.time_investments:
        return False
    if f.categories and _value(task.category) not in f.categories:
        return False

    if f.has_checklist is not None and f.has_checklist != bool(task.sub_items):
        return False
    if f.is_forwarded is not None and f.is_forwarded != bool(task.is_forwarded):
        return False
    if f.no_order is not None and f.no_order != (not task.order):
        return False
    if f.is_processed is not None and f.is_processed != task.is_processed:
        return False

    return True


def apply_filters(tasks: Iterable, f: Optional[TaskFilter]) -> list:
    if f is None:
        return list(tasks)
    return [t for t in tasks if _matches(t, f)]
