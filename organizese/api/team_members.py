"""
Team members API endpoints
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from organizese.database import get_db
from organizese.models.skill import Skill
from organizese.models.team_member import TeamMember, MemberStatus
from organizese.api.session import SessionContext, get_session_context
from organizese.utils.validators import unknown_ids

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Pydantic Schemas ---

class AddressSchema(BaseModel):
    cep: str = ""
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""


class ProjectRefSchema(BaseModel):
    id: str
    name: str
    status: str = ""


class TeamMemberResponse(BaseModel):
    id: str
    name: str
    role: str
    email: str
    phone: str
    address: Optional[AddressSchema]
    status: MemberStatus
    is_partner: bool
    skill_ids: List[str]
    origin: str
    projects: List[ProjectRefSchema]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TeamMemberCreate(BaseModel):
    name: str = Field(min_length=1)
    role: str = ""
    email: str = ""
    phone: str = ""
    address: Optional[AddressSchema] = None
    status: MemberStatus = MemberStatus.ATIVO
    is_partner: bool = False
    skill_ids: List[str] = []
    origin: str = ""
    projects: List[ProjectRefSchema] = []


class TeamMemberUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None
    status: Optional[MemberStatus] = None
    is_partner: Optional[bool] = None
    skill_ids: Optional[List[str]] = None
    origin: Optional[str] = None
    projects: Optional[List[ProjectRefSchema]] = None


async def _get_member(db: AsyncSession, ctx: SessionContext, member_id: str) -> TeamMember:
    result = await db.execute(
        select(TeamMember).where(TeamMember.id == member_id, TeamMember.user_id == ctx.user_id)
    )
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    return member


async def _check_skills(db: AsyncSession, ctx: SessionContext, skill_ids: List[str]) -> None:
    if not skill_ids:
        return
    result = await db.execute(
        select(Skill.id).where(Skill.user_id == ctx.user_id, Skill.id.in_(skill_ids))
    )
    missing = unknown_ids(skill_ids, result.scalars().all())
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown skill ids: {', '.join(missing)}")


@router.get("/", response_model=List[TeamMemberResponse])
async def list_team_members(
    search: Optional[str] = None,
    status: Optional[MemberStatus] = None,
    skill_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """List team members. search matches name, role or email"""
    query = select(TeamMember).where(TeamMember.user_id == ctx.user_id).order_by(TeamMember.name)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            TeamMember.name.ilike(pattern),
            TeamMember.role.ilike(pattern),
            TeamMember.email.ilike(pattern),
        ))
    if status:
        query = query.where(TeamMember.status == status)

    result = await db.execute(query)
    members = result.scalars().all()
    # skill_ids is a JSON list, filtered here rather than in SQL
    if skill_id:
        members = [m for m in members if skill_id in (m.skill_ids or [])]
    return members


@router.get("/{member_id}", response_model=TeamMemberResponse)
async def get_team_member(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    return await _get_member(db, ctx, member_id)


@router.post("/", response_model=TeamMemberResponse)
async def create_team_member(
    data: TeamMemberCreate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    await _check_skills(db, ctx, data.skill_ids)

    member = TeamMember(user_id=ctx.user_id, **data.model_dump())
    db.add(member)
    await db.commit()
    await db.refresh(member)
    logger.info(f"Created team member {member.id} for user {ctx.user_id}")
    return member


@router.put("/{member_id}", response_model=TeamMemberResponse)
async def update_team_member(
    member_id: str,
    data: TeamMemberUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    member = await _get_member(db, ctx, member_id)
    updates = data.model_dump(exclude_unset=True)
    # address is the only nullable column; an explicit null elsewhere is ignored
    updates = {k: v for k, v in updates.items() if v is not None or k == "address"}
    if "skill_ids" in updates:
        await _check_skills(db, ctx, updates["skill_ids"])

    for key, value in updates.items():
        setattr(member, key, value)

    await db.commit()
    await db.refresh(member)
    return member


@router.delete("/{member_id}")
async def delete_team_member(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    member = await _get_member(db, ctx, member_id)
    await db.delete(member)
    await db.commit()
    return {"message": "Team member deleted"}
