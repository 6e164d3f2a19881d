"""
Task list filters, sort options, time estimates and statistics
"""
from datetime import date

from organizese.models.task import Task, TaskStatus
from organizese.services.filters import TaskFilter, apply_filters
from organizese.services.stats import compute_task_stats, daily_breakdown
from organizese.utils.dates import add_months, is_weekend, next_business_day
from organizese.utils.task_helpers import format_minutes, sort_tasks, time_in_minutes


def _task(task_id, **overrides):
    fields = dict(
        id=task_id,
        title=task_id,
        type="own-task",
        priority="none",
        time_investment="low",
        custom_time_minutes=None,
        category="personal",
        status=TaskStatus.PENDING,
        scheduled_date=date(2024, 3, 4),
        assigned_person_id=None,
        sub_items=[],
        order=1,
        is_forwarded=False,
        is_concluded=False,
        forward_count=0,
        completion_history=[],
        forward_history=[],
    )
    fields.update(overrides)
    return Task(**fields)


# ===================== FILTERS =====================


def test_filter_by_type_and_priority():
    tasks = [
        _task("a", type="meeting", priority="extreme"),
        _task("b", type="meeting"),
        _task("c", priority="extreme"),
    ]
    result = apply_filters(tasks, TaskFilter(types=["meeting"], priorities=["extreme"]))
    assert [t.id for t in result] == ["a"]


def test_filter_by_date_range():
    tasks = [_task("early", scheduled_date=date(2024, 3, 1)), _task("late", scheduled_date=date(2024, 3, 9))]
    result = apply_filters(tasks, TaskFilter(start_date=date(2024, 3, 2), end_date=date(2024, 3, 10)))
    assert [t.id for t in result] == ["late"]


def test_not_done_filter_matches_any_not_done_entry():
    reopened = _task("reopened", status=TaskStatus.PENDING, completion_history=[
        {"completed_at": "2024-03-04T10:00:00Z", "status": "not-done", "date": "2024-03-04"},
    ])
    done = _task("done", status=TaskStatus.COMPLETED, completion_history=[
        {"completed_at": "2024-03-04T10:00:00Z", "status": "completed", "date": "2024-03-04"},
    ])
    result = apply_filters([reopened, done], TaskFilter(statuses=["not-done"]))
    assert [t.id for t in result] == ["reopened"]


def test_status_filter_uses_live_status():
    tasks = [_task("a", status=TaskStatus.COMPLETED), _task("b")]
    assert [t.id for t in apply_filters(tasks, TaskFilter(statuses=["completed"]))] == ["a"]


def test_boolean_filters():
    tasks = [
        _task("checklist", sub_items=[{"id": "1", "text": "x", "completed": False, "order": 1}]),
        _task("forwarded", is_forwarded=True),
        _task("unordered", order=0),
    ]
    assert [t.id for t in apply_filters(tasks, TaskFilter(has_checklist=True))] == ["checklist"]
    assert [t.id for t in apply_filters(tasks, TaskFilter(is_forwarded=True))] == ["forwarded"]
    assert [t.id for t in apply_filters(tasks, TaskFilter(no_order=True))] == ["unordered"]
    assert len(apply_filters(tasks, TaskFilter(is_processed=False))) == 3


def test_no_filter_returns_everything():
    tasks = [_task("a"), _task("b")]
    assert apply_filters(tasks, None) == tasks


# ===================== SORT / TIME =====================


def test_sort_by_priority_puts_extreme_first():
    tasks = [_task("n"), _task("e", priority="extreme"), _task("p", priority="priority")]
    assert [t.id for t in sort_tasks(tasks, "priority")] == ["e", "p", "n"]


def test_sort_by_order_and_title():
    tasks = [_task("b", order=2), _task("a", order=3), _task("c", order=1)]
    assert [t.id for t in sort_tasks(tasks, "order")] == ["c", "b", "a"]
    assert [t.id for t in sort_tasks(tasks, "title")] == ["a", "b", "c"]


def test_time_in_minutes():
    assert time_in_minutes("low") == 60
    assert time_in_minutes("custom-8h") == 480
    assert time_in_minutes("custom", 45) == 45
    assert time_in_minutes("custom") == 5


def test_format_minutes():
    assert format_minutes(30) == "30min"
    assert format_minutes(120) == "2h"
    assert format_minutes(150) == "2h 30min"


# ===================== DATES =====================


def test_date_helpers():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert is_weekend(date(2024, 3, 9))
    assert not is_weekend(date(2024, 3, 8))
    # Friday -> Monday
    assert next_business_day("2024-03-08") == date(2024, 3, 11)


# ===================== STATS =====================


def test_compute_task_stats():
    tasks = [
        _task("done", status=TaskStatus.COMPLETED, forward_count=2),
        _task("overdue", scheduled_date=date(2024, 3, 1), time_investment="high"),
        _task("today", scheduled_date=date(2024, 3, 4), time_investment="custom", custom_time_minutes=15),
        _task("failed", status=TaskStatus.NOT_DONE, scheduled_date=date(2024, 2, 1)),
    ]
    stats = compute_task_stats(tasks, today=date(2024, 3, 4))

    assert stats.total_tasks == 4
    assert stats.processed_tasks == 2
    assert stats.pending_tasks == 2
    assert stats.overdue_tasks == 1
    assert stats.completion_rate == 50.0
    assert stats.average_forwards == 0.5
    assert stats.total_minutes == 60 + 240 + 15 + 60


def test_stats_on_empty_list():
    stats = compute_task_stats([], today=date(2024, 3, 4))
    assert stats.total_tasks == 0
    assert stats.completion_rate == 0.0


def test_daily_breakdown_most_recent_first():
    tasks = [
        _task("a", scheduled_date=date(2024, 3, 4), status=TaskStatus.COMPLETED),
        _task("b", scheduled_date=date(2024, 3, 4)),
        _task("c", scheduled_date=date(2024, 3, 5), is_concluded=True, status=TaskStatus.FORWARDED_DATE),
    ]
    rows = daily_breakdown(tasks)
    assert [r.date for r in rows] == [date(2024, 3, 5), date(2024, 3, 4)]
    assert (rows[1].total, rows[1].concluded, rows[1].pending, rows[1].rate) == (2, 1, 1, 50)
    assert rows[0].rate == 100
