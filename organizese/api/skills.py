"""
Skills API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from pydantic import BaseModel, Field

from organizese.database import get_db
from organizese.models.skill import Skill
from organizese.api.session import SessionContext, get_session_context

router = APIRouter()


class SkillResponse(BaseModel):
    id: str
    name: str
    observation: str
    area: str

    class Config:
        from_attributes = True


class SkillCreate(BaseModel):
    name: str = Field(min_length=1)
    observation: str = ""
    area: str = ""


class SkillUpdate(BaseModel):
    name: Optional[str] = None
    observation: Optional[str] = None
    area: Optional[str] = None


async def _get_skill(db: AsyncSession, ctx: SessionContext, skill_id: str) -> Skill:
    result = await db.execute(
        select(Skill).where(Skill.id == skill_id, Skill.user_id == ctx.user_id)
    )
    skill = result.scalar_one_or_none()
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    return skill


@router.get("/", response_model=List[SkillResponse])
async def list_skills(
    area: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """List skills, optionally for one area"""
    query = select(Skill).where(Skill.user_id == ctx.user_id).order_by(Skill.area, Skill.name)
    if area:
        query = query.where(Skill.area == area)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{skill_id}", response_model=SkillResponse)
async def get_skill(
    skill_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    return await _get_skill(db, ctx, skill_id)


@router.post("/", response_model=SkillResponse)
async def create_skill(
    data: SkillCreate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    skill = Skill(user_id=ctx.user_id, **data.model_dump())
    db.add(skill)
    await db.commit()
    await db.refresh(skill)
    return skill


@router.put("/{skill_id}", response_model=SkillResponse)
async def update_skill(
    skill_id: str,
    data: SkillUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    skill = await _get_skill(db, ctx, skill_id)

    for key, value in data.model_dump(exclude_none=True).items():
        setattr(skill, key, value)

    await db.commit()
    await db.refresh(skill)
    return skill


@router.delete("/{skill_id}")
async def delete_skill(
    skill_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    skill = await _get_skill(db, ctx, skill_id)
    await db.delete(skill)
    await db.commit()
    return {"message": "Skill deleted"}
