"""
Repair of drifted completion history.

Completion entries can fall out of step with the task they belong to: a
reschedule leaves entries dated on the old day behind, and the
``was_forwarded`` flag can disagree with the forward log. The repair is an
explicit batch pass, not a write-time constraint.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from organizese.models.task import Task
from organizese.services.history import completion_entries, forward_entries
from organizese.utils.dates import parse_iso_date, to_iso

logger = logging.getLogger(__name__)


def repair_task_history(task) -> bool:
    """
    Recompute was_forwarded on every completion entry and drop entries whose
    date is not the task's current scheduled date. Returns True when the
    task's completion history changed. A second run is a no-op.
    """
    scheduled = to_iso(parse_iso_date(task.scheduled_date))
    forwarded_from = {f.original_date for f in forward_entries(task)}

    repaired = []
    for entry in completion_entries(task):
        if entry.date != scheduled:
            continue
        repaired.append(entry.model_copy(update={"was_forwarded": entry.date in forwarded_from}).model_dump())

    if repaired == list(task.completion_history or []):
        return False

    task.completion_history = repaired
    return True


async def clean_inconsistent_task_data(db: AsyncSession, user_id: Optional[str] = None) -> int:
    """Run repair_task_history over the store; returns how many tasks were updated"""
    query = select(Task)
    if user_id:
        query = query.where(Task.user_id == user_id)

    result = await db.execute(query)
    tasks = result.scalars().all()

    updated = 0
    for task in tasks:
        before = len(task.completion_history or [])
        if repair_task_history(task):
            updated += 1
            logger.info(
                f"Cleaned task {task.id} ('{task.title}'): "
                f"{before} -> {len(task.completion_history)} completion entries"
            )

    await db.commit()
    logger.info(f"History cleanup finished: {updated} of {len(tasks)} tasks updated")
    return updated
