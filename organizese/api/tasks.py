"""
Task API endpoints - scheduling, ordering, completion and forwarding
"""
import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from organizese.api.session import SessionContext, get_session_context
from organizese.config import get_settings
from organizese.database import get_db
from organizese.models.person import Person
from organizese.models.task import (
    Task, TaskType, TaskPriority, TimeInvestment, TaskCategory, TaskStatus, RoutineCycle,
)
from organizese.models.team_member import TeamMember
from organizese.services.data_cleaner import clean_inconsistent_task_data
from organizese.services.filters import TaskFilter, apply_filters
from organizese.services.history import (
    CompletionRecord, ForwardRecord, HistoryEntry,
    build_forward_chain, latest_completion, record_completion, record_forward, reopen_task, task_timeline,
)
from organizese.services.ordering import (
    apply_adjustments, calculate_insert_reordering, calculate_move_reordering,
    next_available_order, normalize_task_sequence,
)
from organizese.services.sharing import drop_task_shares, get_shared_task, tasks_shared_with
from organizese.services.routine import expand_routine_task, validate_routine_config
from organizese.services.stats import compute_task_stats, daily_breakdown
from organizese.utils.dates import next_business_day, to_iso, today_in_timezone
from organizese.utils.task_helpers import SORT_OPTIONS, sort_tasks
from organizese.utils.validators import validate_custom_time

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter()


# --- Pydantic Schemas ---

class SubItemSchema(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    completed: bool = False
    order: int = 0


class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    observations: str
    type: TaskType
    priority: TaskPriority
    time_investment: TimeInvestment
    custom_time_minutes: Optional[int]
    category: TaskCategory
    status: TaskStatus
    scheduled_date: date
    assigned_person_id: Optional[str]
    sub_items: List[SubItemSchema]
    order: int
    is_routine: bool
    routine_cycle: Optional[RoutineCycle]
    routine_start_date: Optional[date]
    routine_end_date: Optional[date]
    include_weekends: bool
    is_forwarded: bool
    is_concluded: bool
    is_processed: bool
    concluded_at: Optional[datetime]
    forward_count: int
    completion_history: List[CompletionRecord]
    forward_history: List[ForwardRecord]
    origin_task_id: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    observations: str = ""
    type: TaskType = TaskType.OWN_TASK
    priority: TaskPriority = TaskPriority.NONE
    time_investment: TimeInvestment = TimeInvestment.LOW
    custom_time_minutes: Optional[int] = None
    category: TaskCategory = TaskCategory.PERSONAL
    scheduled_date: date
    assigned_person_id: Optional[str] = None
    sub_items: List[SubItemSchema] = []
    order: int = 0
    is_routine: bool = False
    routine_cycle: Optional[RoutineCycle] = None
    routine_start_date: Optional[date] = None
    routine_end_date: Optional[date] = None
    include_weekends: bool = True

    @model_validator(mode="after")
    def check_custom_time(self):
        validate_custom_time(self.time_investment, self.custom_time_minutes)
        return self


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    observations: Optional[str] = None
    type: Optional[TaskType] = None
    priority: Optional[TaskPriority] = None
    time_investment: Optional[TimeInvestment] = None
    custom_time_minutes: Optional[int] = None
    category: Optional[TaskCategory] = None
    scheduled_date: Optional[date] = None
    assigned_person_id: Optional[str] = None
    sub_items: Optional[List[SubItemSchema]] = None
    order: Optional[int] = None


class CompletionRequest(BaseModel):
    status: Literal["completed", "not-done"]


class BulkCompletionRequest(BaseModel):
    task_ids: List[str]
    status: Literal["completed", "not-done"]


class ForwardRequest(BaseModel):
    new_date: Optional[date] = None
    recipient_id: Optional[str] = None
    reason: Optional[str] = None
    keep_order: bool = True
    keep_checklist_status: bool = True


class ForwardResponse(BaseModel):
    original: TaskResponse
    forwarded: TaskResponse


class BulkRescheduleRequest(BaseModel):
    task_ids: List[str]
    new_date: Optional[date] = None
    keep_order: bool = True
    keep_checklist_status: bool = True


class RescheduleFailure(BaseModel):
    id: str
    reason: str


class BulkRescheduleResponse(BaseModel):
    rescheduled: List[TaskResponse]
    failed: List[RescheduleFailure]


class ReorderRequest(BaseModel):
    task_ids: List[str]


class AdjustmentSchema(BaseModel):
    task_id: str
    old_order: int
    new_order: int

    class Config:
        from_attributes = True


class OrderPreview(BaseModel):
    adjustments: List[AdjustmentSchema]
    message: str


class StatsResponse(BaseModel):
    total_tasks: int
    processed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    completion_rate: float
    average_forwards: float
    total_minutes: int

    class Config:
        from_attributes = True


class DayStatsResponse(BaseModel):
    date: date
    total: int
    concluded: int
    pending: int
    rate: int

    class Config:
        from_attributes = True


# --- Helpers ---

async def _get_task(db: AsyncSession, ctx: SessionContext, task_id: str) -> Task:
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.user_id == ctx.user_id)
    )
    task = result.scalar_one_or_none()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


async def _tasks_on_dates(db: AsyncSession, ctx: SessionContext, dates: Iterable[date]) -> List[Task]:
    result = await db.execute(
        select(Task)
        .where(Task.user_id == ctx.user_id, Task.scheduled_date.in_(list(set(dates))))
        .order_by(Task.scheduled_date, Task.order)
    )
    return list(result.scalars().all())


async def _ensure_assignee(db: AsyncSession, ctx: SessionContext, person_id: Optional[str]) -> None:
    """Assignees are weak references into people or team members"""
    if not person_id:
        return
    for model in (Person, TeamMember):
        result = await db.execute(
            select(model.id).where(model.id == person_id, model.user_id == ctx.user_id)
        )
        if result.scalar_one_or_none() is not None:
            return
    raise HTTPException(status_code=400, detail="Assigned person not found")


def _already_recorded(task: Task, status: str) -> bool:
    """The task already carries this status, recorded on its current date"""
    last = latest_completion(task)
    return (
        last is not None
        and task.status == status
        and last.status == status
        and last.date == to_iso(task.scheduled_date)
    )


def _place(pool: List[Task], task: Task, requested_order: int) -> None:
    """Give task a position among pool (same user, any date): insert-at when requested, else append"""
    if requested_order and requested_order > 0:
        result = calculate_insert_reordering(pool, task.scheduled_date, requested_order, exclude_task_id=task.id)
        apply_adjustments(pool, result.adjustments)
        task.order = requested_order
    else:
        task.order = next_available_order([t for t in pool if t.id != task.id], task.scheduled_date)


async def _forward(
    db: AsyncSession,
    ctx: SessionContext,
    task: Task,
    new_date: date,
    reason: Optional[str],
    recipient_id: Optional[str],
    keep_order: bool,
    keep_checklist_status: bool,
) -> Task:
    await _ensure_assignee(db, ctx, recipient_id)
    payload = record_forward(
        task,
        new_date,
        reason=reason,
        recipient=recipient_id,
        keep_order=keep_order,
        keep_checklist_status=keep_checklist_status,
    )
    requested_order = payload.pop("order")
    forwarded = Task(id=str(uuid.uuid4()), order=0, **payload)

    pool = await _tasks_on_dates(db, ctx, [forwarded.scheduled_date])
    _place(pool, forwarded, requested_order)
    db.add(forwarded)
    return forwarded


# --- Endpoints ---

@router.get("/", response_model=List[TaskResponse])
async def list_tasks(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Optional[List[str]] = Query(None),
    priority: Optional[List[str]] = Query(None),
    status: Optional[List[str]] = Query(None),
    assigned_person_id: Optional[str] = None,
    time_investment: Optional[List[str]] = Query(None),
    category: Optional[List[str]] = Query(None),
    has_checklist: Optional[bool] = None,
    is_forwarded: Optional[bool] = None,
    no_order: Optional[bool] = None,
    is_processed: Optional[bool] = None,
    include_shared: bool = False,
    sort: str = "order",
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """List tasks with filters. sort: order | priority | title | type | timeInvestment"""
    if sort not in SORT_OPTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown sort option: {sort}")

    query = select(Task).where(Task.user_id == ctx.user_id)
    if start_date:
        query = query.where(Task.scheduled_date >= start_date)
    if end_date:
        query = query.where(Task.scheduled_date <= end_date)
    query = query.order_by(Task.scheduled_date, Task.order)

    result = await db.execute(query)
    tasks = list(result.scalars().all())
    if include_shared:
        tasks += [
            t for t in await tasks_shared_with(db, ctx.user_id)
            if (not start_date or t.scheduled_date >= start_date) and (not end_date or t.scheduled_date <= end_date)
        ]
    tasks = apply_filters(tasks, TaskFilter(
        types=type or [],
        priorities=priority or [],
        statuses=status or [],
        assigned_person_id=assigned_person_id,
        time_investments=time_investment or [],
        categories=category or [],
        has_checklist=has_checklist,
        is_forwarded=is_forwarded,
        no_order=no_order,
        is_processed=is_processed,
    ))
    return sort_tasks(tasks, sort)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Totals, overdue count and completion rate"""
    query = select(Task).where(Task.user_id == ctx.user_id)
    if start_date:
        query = query.where(Task.scheduled_date >= start_date)
    if end_date:
        query = query.where(Task.scheduled_date <= end_date)

    result = await db.execute(query)
    return compute_task_stats(result.scalars().all(), today_in_timezone(settings.TIMEZONE))


@router.get("/stats/daily", response_model=List[DayStatsResponse])
async def get_daily_stats(
    start_date: date,
    end_date: date,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Per-day close report, most recent day first"""
    result = await db.execute(
        select(Task).where(
            Task.user_id == ctx.user_id,
            Task.scheduled_date >= start_date,
            Task.scheduled_date <= end_date,
        )
    )
    return daily_breakdown(result.scalars().all())


@router.get("/order/next")
async def get_next_order(
    date: date,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Next free position on a date"""
    tasks = await _tasks_on_dates(db, ctx, [date])
    return {"date": date, "next_order": next_available_order(tasks, date)}


@router.get("/order/preview", response_model=OrderPreview)
async def preview_insert(
    date: date,
    position: int = Query(ge=1),
    exclude_task_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Which tasks would shift if a task took this position"""
    tasks = await _tasks_on_dates(db, ctx, [date])
    return calculate_insert_reordering(tasks, date, position, exclude_task_id=exclude_task_id)


@router.post("/normalize", response_model=List[AdjustmentSchema])
async def normalize_date(
    date: date,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Close gaps in a date's ordering (dense 1..N)"""
    tasks = await _tasks_on_dates(db, ctx, [date])
    adjustments = normalize_task_sequence(tasks, date)
    apply_adjustments(tasks, adjustments)
    await db.commit()
    logger.info(f"Normalized {date}: {len(adjustments)} tasks renumbered")
    return adjustments


@router.put("/reorder")
async def reorder_tasks(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Assign positions 1..N following the given id sequence"""
    result = await db.execute(
        select(Task).where(Task.user_id == ctx.user_id, Task.id.in_(data.task_ids))
    )
    by_id = {t.id: t for t in result.scalars().all()}

    updated = 0
    for index, task_id in enumerate(data.task_ids):
        task = by_id.get(task_id)
        if task is None:
            continue
        task.order = index + 1
        updated += 1

    await db.commit()
    return {"updated": updated}


@router.post("/bulk/complete")
async def bulk_complete(
    data: BulkCompletionRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Record the same completion status on many tasks, skipping repeats"""
    result = await db.execute(
        select(Task).where(Task.user_id == ctx.user_id, Task.id.in_(data.task_ids))
    )
    updated = skipped = 0
    for task in result.scalars().all():
        if _already_recorded(task, data.status):
            skipped += 1
            continue
        record_completion(task, data.status)
        updated += 1

    await db.commit()
    return {"updated": updated, "skipped": skipped}


@router.post("/bulk/reschedule", response_model=BulkRescheduleResponse)
async def bulk_reschedule(
    data: BulkRescheduleRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Forward several tasks to one date; failures are reported per task"""
    reason = "Batch reschedule" if len(data.task_ids) > 1 else "Rescheduled by user"
    rescheduled: List[Task] = []
    failed: List[RescheduleFailure] = []

    for task_id in data.task_ids:
        try:
            task = await _get_task(db, ctx, task_id)
            new_date = data.new_date or next_business_day(task.scheduled_date)
            rescheduled.append(await _forward(
                db, ctx, task, new_date, reason, None, data.keep_order, data.keep_checklist_status,
            ))
        except HTTPException as e:
            logger.warning(f"Could not reschedule task {task_id}: {e.detail}")
            failed.append(RescheduleFailure(id=task_id, reason=str(e.detail)))
        except ValueError as e:
            logger.warning(f"Could not reschedule task {task_id}: {e}")
            failed.append(RescheduleFailure(id=task_id, reason=str(e)))

    await db.commit()
    for task in rescheduled:
        await db.refresh(task)
    return BulkRescheduleResponse(
        rescheduled=[TaskResponse.model_validate(t) for t in rescheduled],
        failed=failed,
    )


@router.post("/maintenance/clean-history")
async def clean_history(
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Repair completion entries that drifted from the task's date / forward log"""
    updated = await clean_inconsistent_task_data(db, user_id=ctx.user_id)
    return {"updated": updated}


@router.post("/", response_model=List[TaskResponse])
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Create a task, or one task per date for a routine"""
    template = data.model_dump()
    error = validate_routine_config(template)
    if error:
        raise HTTPException(status_code=400, detail=error)
    await _ensure_assignee(db, ctx, data.assigned_person_id)

    payloads = expand_routine_task(template, max_occurrences=settings.ROUTINE_MAX_OCCURRENCES)
    if not payloads:
        raise HTTPException(status_code=400, detail="Routine produced no dates")

    pool = await _tasks_on_dates(db, ctx, [p["scheduled_date"] for p in payloads])
    created: List[Task] = []
    for payload in payloads:
        requested_order = payload.pop("order")
        task = Task(id=str(uuid.uuid4()), user_id=ctx.user_id, order=0, **payload)
        # Without a base order every date simply appends
        _place(pool, task, requested_order if data.order > 0 else 0)
        pool.append(task)
        created.append(task)
        db.add(task)

    await db.commit()
    for task in created:
        await db.refresh(task)
    logger.info(f"Created {len(created)} task(s) for user {ctx.user_id}")
    return created


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Get a single task, owned or shared with the current user"""
    shared = await get_shared_task(db, ctx.user_id, task_id)
    if shared is not None:
        return shared
    return await _get_task(db, ctx, task_id)


@router.get("/{task_id}/history", response_model=List[HistoryEntry])
async def get_task_history(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Completion and forward entries in chronological order"""
    task = await _get_task(db, ctx, task_id)
    return task_timeline(task)


@router.get("/{task_id}/chain", response_model=List[TaskResponse])
async def get_forward_chain(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """All tasks linked to this one by forwarding, oldest first"""
    await _get_task(db, ctx, task_id)
    result = await db.execute(select(Task).where(Task.user_id == ctx.user_id))
    return build_forward_chain(result.scalars().all(), task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Update a task, keeping same-day positions consistent"""
    task = await _get_task(db, ctx, task_id)
    updates = data.model_dump(exclude_unset=True)

    if "time_investment" in updates or "custom_time_minutes" in updates:
        try:
            validate_custom_time(
                updates.get("time_investment") or task.time_investment,
                updates.get("custom_time_minutes", task.custom_time_minutes),
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if updates.get("assigned_person_id"):
        await _ensure_assignee(db, ctx, updates["assigned_person_id"])

    new_order = updates.pop("order", None)
    old_date = task.scheduled_date
    new_date = updates.pop("scheduled_date", None) or old_date

    for key, value in updates.items():
        setattr(task, key, value)

    if new_date != old_date:
        pool = await _tasks_on_dates(db, ctx, [old_date, new_date])
        task.scheduled_date = new_date
        _place(pool, task, new_order or 0)
        remaining = [t for t in pool if t.id != task.id]
        apply_adjustments(remaining, normalize_task_sequence(remaining, old_date))
    elif new_order is not None and new_order != task.order:
        pool = await _tasks_on_dates(db, ctx, [old_date])
        result = calculate_move_reordering(pool, old_date, task.id, new_order)
        apply_adjustments(pool, result.adjustments)
        task.order = new_order
        logger.debug(result.message)

    task.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(task)
    return task


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Delete a task and close the gap it leaves"""
    task = await _get_task(db, ctx, task_id)
    scheduled = task.scheduled_date

    await drop_task_shares(db, task.id)
    await db.delete(task)
    await db.flush()

    remaining = await _tasks_on_dates(db, ctx, [scheduled])
    apply_adjustments(remaining, normalize_task_sequence(remaining, scheduled))
    await db.commit()
    return {"message": "Task deleted"}


@router.post("/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    task_id: str,
    data: CompletionRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Mark a task completed / not done (repeating the current status on the same date is a no-op)"""
    task = await _get_task(db, ctx, task_id)

    if _already_recorded(task, data.status):
        return task

    record_completion(task, data.status)
    await db.commit()
    await db.refresh(task)
    return task


@router.post("/{task_id}/reopen", response_model=TaskResponse)
async def reopen(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Set a task back to pending"""
    task = await _get_task(db, ctx, task_id)
    reopen_task(task)
    await db.commit()
    await db.refresh(task)
    return task


@router.post("/{task_id}/forward", response_model=ForwardResponse)
async def forward_task(
    task_id: str,
    data: ForwardRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Reschedule and/or hand over a task; the original is concluded and a new task created"""
    task = await _get_task(db, ctx, task_id)
    new_date = data.new_date or next_business_day(task.scheduled_date)

    forwarded = await _forward(
        db, ctx, task, new_date, data.reason, data.recipient_id,
        data.keep_order, data.keep_checklist_status,
    )
    await db.commit()
    await db.refresh(task)
    await db.refresh(forwarded)
    return ForwardResponse(
        original=TaskResponse.model_validate(task),
        forwarded=TaskResponse.model_validate(forwarded),
    )
