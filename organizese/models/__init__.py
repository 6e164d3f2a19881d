from organizese.models.task import (
    Task,
    TaskType,
    TaskPriority,
    TimeInvestment,
    TaskCategory,
    TaskStatus,
    RoutineCycle,
)
from organizese.models.person import Person
from organizese.models.skill import Skill
from organizese.models.team_member import TeamMember, MemberStatus
from organizese.models.task_share import TaskShare

__all__ = [
    "Task",
    "TaskType",
    "TaskPriority",
    "TimeInvestment",
    "TaskCategory",
    "TaskStatus",
    "RoutineCycle",
    "Person",
    "Skill",
    "TeamMember",
    "MemberStatus",
    "TaskShare",
]
