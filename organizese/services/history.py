"""
Completion and forward history.

Each task carries two append-only logs stored as JSON lists. Entries are typed
as a tagged union (``kind`` = "completion" | "forward") so the logs can be
validated and matched exhaustively. Forwarding a task annotates the original
and returns the payload of the new task; the new task points back at the
original through ``origin_task_id``.
"""
import logging
from collections import deque
from datetime import datetime
from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from organizese.models.task import TaskStatus
from organizese.utils.dates import DateLike, now_iso, parse_iso_date, to_iso

logger = logging.getLogger(__name__)

# Fields a forwarded task inherits from its origin
INHERITED_FIELDS = (
    "user_id",
    "title",
    "description",
    "observations",
    "type",
    "priority",
    "time_investment",
    "custom_time_minutes",
    "category",
    "assigned_person_id",
    "is_routine",
    "routine_cycle",
    "routine_start_date",
    "routine_end_date",
    "include_weekends",
)

COMPLETION_STATUSES = (TaskStatus.COMPLETED, TaskStatus.NOT_DONE)


class CompletionRecord(BaseModel):
    kind: Literal["completion"] = "completion"
    completed_at: str
    status: Literal["completed", "not-done"]
    date: str  # scheduled date of the task when recorded
    was_forwarded: bool = False

    class Config:
        frozen = True


class ForwardRecord(BaseModel):
    kind: Literal["forward"] = "forward"
    forwarded_at: str
    forwarded_to: Optional[str] = None
    new_date: str
    original_date: str
    status_at_forward: str
    reason: str = ""
    spawned_task: bool = True  # False on the breadcrumb carried by the new task

    class Config:
        frozen = True


HistoryEntry = Annotated[Union[CompletionRecord, ForwardRecord], Field(discriminator="kind")]

_entries_adapter = TypeAdapter(List[HistoryEntry])


def _parse(raw: Optional[Iterable[Dict[str, Any]]], kind: str) -> List[Any]:
    # Entries imported from older backups carry no "kind" tag
    tagged = [{"kind": kind, **entry} for entry in (raw or [])]
    return _entries_adapter.validate_python(tagged)


def completion_entries(task) -> List[CompletionRecord]:
    return _parse(task.completion_history, "completion")


def forward_entries(task) -> List[ForwardRecord]:
    return _parse(task.forward_history, "forward")


def _timestamp(entry: HistoryEntry) -> str:
    if isinstance(entry, CompletionRecord):
        return entry.completed_at
    return entry.forwarded_at


def task_timeline(task) -> List[HistoryEntry]:
    """Both logs merged in chronological order (completions first on ties)"""
    entries: List[HistoryEntry] = [*completion_entries(task), *forward_entries(task)]
    return sorted(entries, key=_timestamp)


def latest_completion(task) -> Optional[CompletionRecord]:
    entries = completion_entries(task)
    return entries[-1] if entries else None


def record_completion(
    task,
    status: Union[TaskStatus, str],
    completed_at: Optional[str] = None,
    was_forwarded: Optional[bool] = None,
) -> CompletionRecord:
    """
    Append a completion entry and project its status onto task.status.

    Calling this twice appends twice; guarding against duplicate UI events
    is the caller's job.
    """
    status = TaskStatus(status)
    if status not in COMPLETION_STATUSES:
        raise ValueError(f"Not a completion status: {status.value}")

    if was_forwarded is None:
        was_forwarded = bool(task.forward_history)

    entry = CompletionRecord(
        completed_at=completed_at or now_iso(),
        status=status.value,
        date=to_iso(parse_iso_date(task.scheduled_date)),
        was_forwarded=was_forwarded,
    )
    # Reassign so the ORM sees the JSON column change
    task.completion_history = [*(task.completion_history or []), entry.model_dump()]
    task.status = status
    return entry


def reopen_task(task) -> None:
    """Back to pending; the completion log is left as an audit trail"""
    task.status = TaskStatus.PENDING
    task.is_concluded = False
    task.concluded_at = None


def record_forward(
    task,
    new_date: DateLike,
    reason: Optional[str] = None,
    recipient: Optional[str] = None,
    forwarded_at: Optional[str] = None,
    keep_order: bool = True,
    keep_checklist_status: bool = True,
) -> Dict[str, Any]:
    """
    Forward a task to another date and/or person.

    The original gets a ForwardRecord, one more forward_count, and is marked
    forwarded and concluded. The returned dict is the creation payload of the
    new task, which starts with an empty completion log and a breadcrumb
    ForwardRecord describing where it came from.
    """
    forwarded_at = forwarded_at or now_iso()
    original_date = parse_iso_date(task.scheduled_date)
    target_date = parse_iso_date(new_date)
    previous_status = TaskStatus(task.status or TaskStatus.PENDING)

    if reason is None:
        reason = "Forwarded to team member" if recipient else "Rescheduled by user"

    sent = ForwardRecord(
        forwarded_at=forwarded_at,
        forwarded_to=recipient,
        new_date=to_iso(target_date),
        original_date=to_iso(original_date),
        status_at_forward=previous_status.value,
        reason=reason,
        spawned_task=True,
    )
    task.forward_history = [*(task.forward_history or []), sent.model_dump()]
    task.forward_count = (task.forward_count or 0) + 1
    task.is_forwarded = True
    task.is_concluded = True
    task.concluded_at = datetime.utcnow()
    task.status = TaskStatus.FORWARDED_PERSON if recipient else TaskStatus.FORWARDED_DATE

    breadcrumb = ForwardRecord(
        forwarded_at=forwarded_at,
        forwarded_to=recipient,
        new_date=to_iso(target_date),
        original_date=to_iso(original_date),
        status_at_forward=TaskStatus.PENDING.value,
        reason=f"Reschedule received from {original_date.strftime('%d/%m/%Y')}",
        spawned_task=False,
    )

    sub_items = [dict(item) for item in (task.sub_items or [])]
    if not keep_checklist_status:
        for item in sub_items:
            item["completed"] = False

    payload = {name: getattr(task, name, None) for name in INHERITED_FIELDS}
    payload.update(
        scheduled_date=target_date,
        assigned_person_id=recipient or task.assigned_person_id,
        sub_items=sub_items,
        order=(task.order or 0) if keep_order else 0,
        status=TaskStatus.PENDING,
        forward_history=[breadcrumb.model_dump()],
        forward_count=0,
        completion_history=[],
        is_forwarded=True,
        is_concluded=False,
        concluded_at=None,
        origin_task_id=task.id,
    )
    logger.debug(f"Forwarded task {task.id} from {sent.original_date} to {sent.new_date}")
    return payload


def build_forward_chain(tasks: Iterable[Any], task_id: str) -> List[Any]:
    """
    Every task linked to task_id through origin_task_id: ancestors first
    (oldest at the front), then the task, then its descendants breadth-first.
    """
    by_id = {t.id: t for t in tasks}
    if task_id not in by_id:
        return []

    children: Dict[str, List[Any]] = {}
    for t in by_id.values():
        if t.origin_task_id:
            children.setdefault(t.origin_task_id, []).append(t)

    ancestors = []
    seen = {task_id}
    current = by_id[task_id]
    while current.origin_task_id and current.origin_task_id in by_id and current.origin_task_id not in seen:
        current = by_id[current.origin_task_id]
        seen.add(current.id)
        ancestors.append(current)
    ancestors.reverse()

    descendants = []
    queue = deque(children.get(task_id, []))
    while queue:
        child = queue.popleft()
        if child.id in seen:
            continue
        seen.add(child.id)
        descendants.append(child)
        queue.extend(children.get(child.id, []))

    return [*ancestors, by_id[task_id], *descendants]
