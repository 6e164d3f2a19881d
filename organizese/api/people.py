"""
People API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from organizese.database import get_db
from organizese.models.person import Person
from organizese.api.session import SessionContext, get_session_context

router = APIRouter()


class PersonResponse(BaseModel):
    id: str
    name: str
    role: str
    contact: str
    is_partner: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class PersonCreate(BaseModel):
    name: str = Field(min_length=1)
    role: str = ""
    contact: str = ""
    is_partner: bool = False


class PersonUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    contact: Optional[str] = None
    is_partner: Optional[bool] = None


async def _get_person(db: AsyncSession, ctx: SessionContext, person_id: str) -> Person:
    result = await db.execute(
        select(Person).where(Person.id == person_id, Person.user_id == ctx.user_id)
    )
    person = result.scalar_one_or_none()
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person


@router.get("/", response_model=List[PersonResponse])
async def list_people(
    partners_only: bool = False,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """List people, alphabetically"""
    query = select(Person).where(Person.user_id == ctx.user_id).order_by(Person.name)
    if partners_only:
        query = query.where(Person.is_partner == True)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{person_id}", response_model=PersonResponse)
async def get_person(
    person_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    return await _get_person(db, ctx, person_id)


@router.post("/", response_model=PersonResponse)
async def create_person(
    data: PersonCreate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    person = Person(user_id=ctx.user_id, **data.model_dump())
    db.add(person)
    await db.commit()
    await db.refresh(person)
    return person


@router.put("/{person_id}", response_model=PersonResponse)
async def update_person(
    person_id: str,
    data: PersonUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    person = await _get_person(db, ctx, person_id)

    for key, value in data.model_dump(exclude_none=True).items():
        setattr(person, key, value)

    await db.commit()
    await db.refresh(person)
    return person


@router.delete("/{person_id}")
async def delete_person(
    person_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context)
):
    """Delete a person. Tasks keep their assignee id as a dangling reference."""
    person = await _get_person(db, ctx, person_id)
    await db.delete(person)
    await db.commit()
    return {"message": "Person deleted"}
