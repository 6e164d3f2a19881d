"""
Task share model - grants another user read access to one task
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, UniqueConstraint
from organizese.database import Base


class TaskShare(Base):
    """One task shared by its owner with one other user"""
    __tablename__ = "task_shares"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(String(36), nullable=False, index=True)
    owner_user_id = Column(String, nullable=False, index=True)
    shared_with_user_id = Column(String, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("task_id", "shared_with_user_id", name="uq_task_share_task_recipient"),
    )
