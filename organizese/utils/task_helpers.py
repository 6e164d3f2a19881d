"""
Task presentation helpers - time estimates and sort orders
"""
from typing import List, Optional, Sequence

from organizese.models.task import TaskPriority, TimeInvestment

SORT_OPTIONS = ("order", "priority", "title", "type", "timeInvestment")

_PRESET_MINUTES = {
    TimeInvestment.CUSTOM_5: 5,
    TimeInvestment.CUSTOM_30: 30,
    TimeInvestment.LOW: 60,
    TimeInvestment.MEDIUM: 120,
    TimeInvestment.HIGH: 240,
    TimeInvestment.CUSTOM_4H: 240,
    TimeInvestment.CUSTOM_8H: 480,
}

_PRIORITY_RANK = {
    TaskPriority.EXTREME: 3,
    TaskPriority.PRIORITY: 2,
    TaskPriority.NONE: 1,
}

_TIME_RANK = {
    TimeInvestment.LOW: 1,
    TimeInvestment.MEDIUM: 2,
    TimeInvestment.HIGH: 3,
}


def time_in_minutes(time_investment, custom_time_minutes: Optional[int] = None) -> int:
    """Estimated minutes for a time-investment bucket"""
    bucket = TimeInvestment(time_investment)
    if bucket == TimeInvestment.CUSTOM:
        return custom_time_minutes or 5
    return _PRESET_MINUTES.get(bucket, 5)


def format_minutes(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}min"
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h {rest}min"


def sort_tasks(tasks: Sequence, sort_by: str = "order") -> List:
    """Return a sorted copy; unknown keys fall back to position order"""
    if sort_by == "priority":
        return sorted(tasks, key=lambda t: _PRIORITY_RANK.get(TaskPriority(t.priority), 0), reverse=True)
    if sort_by == "title":
        return sorted(tasks, key=lambda t: t.title.lower())
    if sort_by == "type":
        return sorted(tasks, key=lambda t: getattr(t.type, "value", t.type))
    if sort_by == "timeInvestment":
        return sorted(tasks, key=lambda t: _TIME_RANK.get(TimeInvestment(t.time_investment), 0))
    return sorted(tasks, key=lambda t: t.order or 0)
