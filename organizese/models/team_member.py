"""
Team member model - people with status, contact data and skill tags
"""
import uuid
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Enum as SQLEnum
from datetime import datetime
from organizese.database import Base


class MemberStatus(str, Enum):
    ATIVO = "ativo"
    INATIVO = "inativo"


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    address = Column(JSON, nullable=True)  # {"cep", "street", "number", "complement", "neighborhood", "city", "state"}
    status = Column(SQLEnum(MemberStatus, native_enum=False), nullable=False, default=MemberStatus.ATIVO)
    is_partner = Column(Boolean, nullable=False, default=False)
    skill_ids = Column(JSON, nullable=False, default=list)  # weak references into skills
    origin = Column(String, nullable=False, default="")
    projects = Column(JSON, nullable=False, default=list)  # [{"id", "name", "status"}]

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
