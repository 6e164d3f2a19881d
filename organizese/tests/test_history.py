"""
Completion and forward history
"""
from datetime import date

import pytest

from organizese.models.task import Task, TaskStatus
from organizese.services.history import (
    CompletionRecord,
    ForwardRecord,
    build_forward_chain,
    completion_entries,
    forward_entries,
    latest_completion,
    record_completion,
    record_forward,
    reopen_task,
    task_timeline,
)


def _task(**overrides):
    fields = dict(
        id="t1",
        user_id="u1",
        title="Pay suppliers",
        description="",
        observations="",
        type="own-task",
        priority="priority",
        time_investment="medium",
        category="business",
        status=TaskStatus.PENDING,
        scheduled_date=date(2024, 3, 4),
        sub_items=[{"id": "s1", "text": "Check invoices", "completed": True, "order": 1}],
        order=2,
        is_routine=False,
        include_weekends=True,
        is_forwarded=False,
        is_concluded=False,
        forward_count=0,
        completion_history=[],
        forward_history=[],
    )
    fields.update(overrides)
    return Task(**fields)


# ===================== COMPLETION =====================


class TestRecordCompletion:

    def test_appends_entry_and_sets_status(self):
        task = _task()
        entry = record_completion(task, "completed", completed_at="2024-03-04T10:00:00Z")

        assert task.status == TaskStatus.COMPLETED
        assert task.is_processed
        assert task.completion_history == [entry.model_dump()]
        assert entry.date == "2024-03-04"
        assert entry.was_forwarded is False

    def test_history_is_append_only(self):
        task = _task()
        record_completion(task, "completed", completed_at="2024-03-04T10:00:00Z")
        first = list(task.completion_history)

        record_completion(task, "not-done", completed_at="2024-03-04T11:00:00Z")
        record_completion(task, "not-done", completed_at="2024-03-04T12:00:00Z")

        assert task.completion_history[:1] == first
        assert [e.status for e in completion_entries(task)] == ["completed", "not-done", "not-done"]
        assert latest_completion(task).completed_at == "2024-03-04T12:00:00Z"

    def test_was_forwarded_defaults_from_forward_log(self):
        task = _task(forward_history=[{
            "forwarded_at": "2024-03-01T09:00:00Z",
            "new_date": "2024-03-04",
            "original_date": "2024-03-01",
            "status_at_forward": "pending",
        }])
        assert record_completion(task, TaskStatus.COMPLETED).was_forwarded is True

    def test_rejects_non_completion_status(self):
        task = _task()
        with pytest.raises(ValueError, match="Not a completion status"):
            record_completion(task, TaskStatus.FORWARDED_DATE)
        assert task.completion_history == []

    def test_reopen_keeps_history(self):
        task = _task()
        record_completion(task, "completed")
        reopen_task(task)

        assert task.status == TaskStatus.PENDING
        assert not task.is_processed
        assert len(task.completion_history) == 1

    def test_latest_completion_empty(self):
        assert latest_completion(_task()) is None


# ===================== FORWARD =====================


class TestRecordForward:

    def test_original_is_annotated_and_concluded(self):
        task = _task()
        record_forward(task, "2024-03-06", forwarded_at="2024-03-04T18:00:00Z")

        assert task.forward_count == 1
        assert task.is_forwarded is True
        assert task.is_concluded is True
        assert task.concluded_at is not None
        assert task.status == TaskStatus.FORWARDED_DATE

        [sent] = forward_entries(task)
        assert sent.original_date == "2024-03-04"
        assert sent.new_date == "2024-03-06"
        assert sent.status_at_forward == "pending"
        assert sent.reason == "Rescheduled by user"
        assert sent.spawned_task is True

    def test_forward_to_person(self):
        task = _task()
        payload = record_forward(task, date(2024, 3, 6), recipient="p9")

        assert task.status == TaskStatus.FORWARDED_PERSON
        assert forward_entries(task)[0].reason == "Forwarded to team member"
        assert payload["assigned_person_id"] == "p9"

    def test_payload_describes_new_task(self):
        task = _task()
        payload = record_forward(task, "2024-03-06", reason="Waiting on client")

        assert payload["scheduled_date"] == date(2024, 3, 6)
        assert payload["status"] == TaskStatus.PENDING
        assert payload["title"] == "Pay suppliers"
        assert payload["user_id"] == "u1"
        assert payload["origin_task_id"] == "t1"
        assert payload["forward_count"] == 0
        assert payload["completion_history"] == []
        assert payload["is_forwarded"] is True
        assert payload["order"] == 2

        [breadcrumb] = payload["forward_history"]
        assert breadcrumb["spawned_task"] is False
        assert breadcrumb["reason"] == "Reschedule received from 04/03/2024"

    def test_checklist_reset_and_order_dropped(self):
        task = _task()
        payload = record_forward(task, "2024-03-06", keep_order=False, keep_checklist_status=False)

        assert payload["order"] == 0
        assert payload["sub_items"][0]["completed"] is False
        # the original's checklist is untouched
        assert task.sub_items[0]["completed"] is True

    def test_forward_count_matches_spawning_entries(self):
        task = _task()
        record_forward(task, "2024-03-05")
        record_forward(task, "2024-03-06")

        spawned = [f for f in forward_entries(task) if f.spawned_task]
        assert task.forward_count == len(spawned) == 2

    def test_completed_task_records_status_at_forward(self):
        task = _task()
        record_completion(task, "completed")
        record_forward(task, "2024-03-06")
        assert forward_entries(task)[0].status_at_forward == "completed"


# ===================== TIMELINE / CHAIN =====================


def test_timeline_merges_both_logs_chronologically():
    task = _task()
    record_completion(task, "not-done", completed_at="2024-03-04T10:00:00Z")
    record_forward(task, "2024-03-05", forwarded_at="2024-03-04T12:00:00Z")
    record_completion(task, "completed", completed_at="2024-03-04T11:00:00Z")

    timeline = task_timeline(task)
    assert [type(e) for e in timeline] == [CompletionRecord, CompletionRecord, ForwardRecord]
    assert [e.kind for e in timeline] == ["completion", "completion", "forward"]


def test_legacy_entries_without_kind_are_parsed():
    task = _task(completion_history=[
        {"completed_at": "2024-03-04T10:00:00Z", "status": "completed", "date": "2024-03-04"},
    ])
    [entry] = completion_entries(task)
    assert entry.kind == "completion"
    assert entry.was_forwarded is False


def test_forward_chain_orders_ancestors_then_descendants():
    root = _task(id="root")
    child = _task(id="child", origin_task_id="root")
    grandchild = _task(id="grandchild", origin_task_id="child")
    sibling = _task(id="sibling", origin_task_id="root")
    unrelated = _task(id="unrelated")

    chain = build_forward_chain([grandchild, sibling, unrelated, child, root], "child")
    assert [t.id for t in chain] == ["root", "child", "grandchild"]

    chain = build_forward_chain([grandchild, sibling, unrelated, child, root], "root")
    assert [t.id for t in chain] == ["root", "sibling", "child", "grandchild"]

    assert build_forward_chain([root], "missing") == []
