"""
Task sharing API endpoints - owners share single tasks with other users
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from organizese.api.session import SessionContext, get_session_context
from organizese.api.tasks import TaskResponse
from organizese.database import get_db
from organizese.models.task import Task
from organizese.models.task_share import TaskShare
from organizese.services.sharing import shares_for_user, tasks_shared_with

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Pydantic Schemas ---

class TaskShareResponse(BaseModel):
    id: str
    task_id: str
    owner_user_id: str
    shared_with_user_id: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TaskShareCreate(BaseModel):
    task_id: str
    shared_with_user_id: str = Field(min_length=1)


# --- Endpoints ---

@router.get("/", response_model=List[TaskShareResponse])
async def list_shares(
    task_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Shares the current user made or received, optionally for one task"""
    return await shares_for_user(db, ctx.user_id, task_id)


@router.get("/shared-with-me", response_model=List[TaskResponse])
async def list_shared_with_me(
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Tasks other users shared with the current user"""
    return await tasks_shared_with(db, ctx.user_id)


@router.post("/", response_model=TaskShareResponse)
async def share_task(
    data: TaskShareCreate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Share one of the current user's tasks"""
    recipient = data.shared_with_user_id.strip()
    if recipient == ctx.user_id:
        raise HTTPException(status_code=400, detail="Cannot share a task with yourself")

    result = await db.execute(
        select(Task.id).where(Task.id == data.task_id, Task.user_id == ctx.user_id)
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Task not found")

    result = await db.execute(
        select(TaskShare.id).where(
            TaskShare.task_id == data.task_id, TaskShare.shared_with_user_id == recipient
        )
    )
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Task already shared with this user")

    share = TaskShare(task_id=data.task_id, owner_user_id=ctx.user_id, shared_with_user_id=recipient)
    db.add(share)
    await db.commit()
    await db.refresh(share)
    logger.info(f"Task {data.task_id} shared by {ctx.user_id} with {recipient}")
    return share


@router.delete("/{task_id}/{shared_with_user_id}")
async def unshare_task(
    task_id: str,
    shared_with_user_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Withdraw a share; only its owner can"""
    result = await db.execute(
        select(TaskShare).where(
            TaskShare.task_id == task_id,
            TaskShare.shared_with_user_id == shared_with_user_id,
            TaskShare.owner_user_id == ctx.user_id,
        )
    )
    share = result.scalar_one_or_none()
    if not share:
        raise HTTPException(status_code=404, detail="Share not found")

    await db.delete(share)
    await db.commit()
    return {"message": "Share removed"}
