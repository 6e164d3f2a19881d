"""
People directory - individuals tasks can be assigned to
"""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime
from organizese.database import Base


class Person(Base):
    __tablename__ = "people"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="")
    contact = Column(String, nullable=False, default="")
    is_partner = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
