"""
Task sharing queries - which tasks a user can read without owning them
"""
from typing import List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from organizese.models.task import Task
from organizese.models.task_share import TaskShare


async def shares_for_user(db: AsyncSession, user_id: str, task_id: Optional[str] = None) -> List[TaskShare]:
    """Shares the user made or received, newest first"""
    query = select(TaskShare).where(
        or_(TaskShare.owner_user_id == user_id, TaskShare.shared_with_user_id == user_id)
    )
    if task_id:
        query = query.where(TaskShare.task_id == task_id)
    result = await db.execute(query.order_by(TaskShare.created_at.desc()))
    return list(result.scalars().all())


async def tasks_shared_with(db: AsyncSession, user_id: str) -> List[Task]:
    result = await db.execute(
        select(Task)
        .join(TaskShare, TaskShare.task_id == Task.id)
        .where(TaskShare.shared_with_user_id == user_id)
        .order_by(Task.scheduled_date, Task.order)
    )
    return list(result.scalars().all())


async def get_shared_task(db: AsyncSession, user_id: str, task_id: str) -> Optional[Task]:
    result = await db.execute(
        select(Task)
        .join(TaskShare, TaskShare.task_id == Task.id)
        .where(
            Task.id == task_id,
            TaskShare.shared_with_user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def drop_task_shares(db: AsyncSession, task_id: str) -> None:
    await db.execute(delete(TaskShare).where(TaskShare.task_id == task_id))
