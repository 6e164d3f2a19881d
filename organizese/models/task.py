"""
Task model - one unit of work scheduled on a calendar date
"""
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, JSON, Enum as SQLEnum

from organizese.database import Base


class TaskType(str, Enum):
    MEETING = "meeting"
    OWN_TASK = "own-task"
    DELEGATED_TASK = "delegated-task"


class TaskPriority(str, Enum):
    NONE = "none"
    PRIORITY = "priority"
    EXTREME = "extreme"


class TimeInvestment(str, Enum):
    CUSTOM_5 = "custom-5"
    CUSTOM_30 = "custom-30"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CUSTOM_4H = "custom-4h"
    CUSTOM_8H = "custom-8h"
    CUSTOM = "custom"


class TaskCategory(str, Enum):
    PERSONAL = "personal"
    BUSINESS = "business"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    NOT_DONE = "not-done"
    FORWARDED_DATE = "forwarded-date"
    FORWARDED_PERSON = "forwarded-person"


class RoutineCycle(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUAL = "biannual"
    ANNUAL = "annual"


def _new_id() -> str:
    return str(uuid.uuid4())


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    observations = Column(Text, nullable=False, default="")

    type = Column(SQLEnum(TaskType, native_enum=False), nullable=False, default=TaskType.OWN_TASK)
    priority = Column(SQLEnum(TaskPriority, native_enum=False), nullable=False, default=TaskPriority.NONE)
    time_investment = Column(SQLEnum(TimeInvestment, native_enum=False), nullable=False, default=TimeInvestment.LOW)
    custom_time_minutes = Column(Integer, nullable=True)
    category = Column(SQLEnum(TaskCategory, native_enum=False), nullable=False, default=TaskCategory.PERSONAL)
    status = Column(SQLEnum(TaskStatus, native_enum=False), nullable=False, default=TaskStatus.PENDING)

    scheduled_date = Column(Date, nullable=False, index=True)
    assigned_person_id = Column(String(36), nullable=True)  # weak reference into people

    # [{"id", "text", "completed", "order"}]
    sub_items = Column(JSON, nullable=False, default=list)
    order = Column(Integer, nullable=False, default=0)

    # Routine configuration the task was expanded from
    is_routine = Column(Boolean, nullable=False, default=False)
    routine_cycle = Column(SQLEnum(RoutineCycle, native_enum=False), nullable=True)
    routine_start_date = Column(Date, nullable=True)
    routine_end_date = Column(Date, nullable=True)
    include_weekends = Column(Boolean, nullable=False, default=True)

    # Forward / completion tracking (append-only JSON logs)
    is_forwarded = Column(Boolean, nullable=False, default=False)
    is_concluded = Column(Boolean, nullable=False, default=False)
    concluded_at = Column(DateTime, nullable=True)
    forward_count = Column(Integer, nullable=False, default=0)
    completion_history = Column(JSON, nullable=False, default=list)
    forward_history = Column(JSON, nullable=False, default=list)
    origin_task_id = Column(String(36), nullable=True, index=True)  # forwarded-from task

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_processed(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.NOT_DONE)
