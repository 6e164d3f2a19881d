"""
Task statistics - dashboard totals and the per-day close report
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List

from organizese.utils.task_helpers import time_in_minutes


@dataclass
class TaskStats:
    total_tasks: int
    processed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    completion_rate: float
    average_forwards: float
    total_minutes: int


@dataclass
class DayStats:
    date: date
    total: int
    concluded: int
    pending: int
    rate: int


def compute_task_stats(tasks: Iterable, today: date) -> TaskStats:
    tasks = list(tasks)
    total = len(tasks)
    processed = sum(1 for t in tasks if t.is_processed)
    overdue = sum(1 for t in tasks if not t.is_processed and t.scheduled_date < today)

    return TaskStats(
        total_tasks=total,
        processed_tasks=processed,
        pending_tasks=total - processed,
        overdue_tasks=overdue,
        completion_rate=round(processed / total * 100, 2) if total else 0.0,
        average_forwards=round(sum(t.forward_count or 0 for t in tasks) / total, 2) if total else 0.0,
        total_minutes=sum(time_in_minutes(t.time_investment, t.custom_time_minutes) for t in tasks),
    )


def daily_breakdown(tasks: Iterable) -> List[DayStats]:
    """One row per scheduled date, most recent first"""
    grouped: Dict[date, list] = defaultdict(list)
    for t in tasks:
        grouped[t.scheduled_date].append(t)

    rows = []
    for day in sorted(grouped, reverse=True):
        day_tasks = grouped[day]
        concluded = sum(1 for t in day_tasks if t.is_concluded or t.is_processed)
        rows.append(DayStats(
            date=day,
            total=len(day_tasks),
            concluded=concluded,
            pending=len(day_tasks) - concluded,
            rate=round(concluded / len(day_tasks) * 100),
        ))
    return rows
