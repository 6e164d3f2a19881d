"""
Skill tags referenced by team members
"""
import uuid
from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime
from organizese.database import Base


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    observation = Column(Text, nullable=False, default="")
    area = Column(String, nullable=False, default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
