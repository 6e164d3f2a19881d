"""
Data Import Script: browser local-storage backup -> OrganizeSe database

Imports a JSON backup exported from the offline version of the app
(camelCase keys) for one user:
- people, skills, team members
- tasks, including checklist, completion and forward history

Records are upserted by id, so re-running the import updates in place.
Task assignees that point to nobody in the backup are dropped.

Usage:
    python scripts/import_local_backup.py /path/to/backup.json <user_id>
"""

import asyncio
import json
import sys
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from organizese.database import AsyncSessionLocal, engine, create_tables
from organizese.models.person import Person
from organizese.models.skill import Skill
from organizese.models.team_member import TeamMember, MemberStatus
from organizese.models.task import (
    Task, TaskType, TaskPriority, TaskStatus, TimeInvestment, TaskCategory, RoutineCycle,
)
from organizese.utils.dates import parse_iso_date
from organizese.utils.logger import get_logger

logger = get_logger("import_local_backup")

COMPLETION_KEYS = {
    "completedAt": "completed_at",
    "status": "status",
    "date": "date",
    "wasForwarded": "was_forwarded",
}

FORWARD_KEYS = {
    "forwardedAt": "forwarded_at",
    "forwardedTo": "forwarded_to",
    "newDate": "new_date",
    "originalDate": "original_date",
    "statusAtForward": "status_at_forward",
    "reason": "reason",
}


class BackupImport:
    """Upserts the contents of one local-storage backup for a user"""

    def __init__(self, backup_path: str, user_id: str):
        self.backup_path = backup_path
        self.user_id = user_id
        self.stats = {
            'people': 0,
            'skills': 0,
            'team_members': 0,
            'tasks': 0,
            'errors': [],
        }

    def load(self) -> Dict[str, List[Dict[str, Any]]]:
        with open(self.backup_path, encoding="utf-8") as f:
            return json.load(f)

    async def import_all(self):
        backup = self.load()
        await create_tables()

        async with AsyncSessionLocal() as session:
            # People first, tasks reference them
            people_ids = await self.import_people(session, backup.get("people", []))
            await self.import_skills(session, backup.get("skills", []))
            member_ids = await self.import_team_members(session, backup.get("teamMembers", []))
            await self.import_tasks(session, backup.get("tasks", []), people_ids | member_ids)
            await session.commit()

        await engine.dispose()
        self.print_summary()

    async def import_people(self, session, records) -> set:
        logger.info(f"Importing {len(records)} people...")
        ids = set()
        for p in records:
            await session.merge(Person(
                id=p["id"],
                user_id=self.user_id,
                name=p["name"],
                role=p.get("role") or "",
                contact=p.get("contact") or "",
                is_partner=bool(p.get("isPartner")),
                created_at=self._parse_timestamp(p.get("createdAt")) or datetime.utcnow(),
                updated_at=self._parse_timestamp(p.get("updatedAt")) or datetime.utcnow(),
            ))
            ids.add(p["id"])
            self.stats['people'] += 1
        return ids

    async def import_skills(self, session, records):
        logger.info(f"Importing {len(records)} skills...")
        for s in records:
            await session.merge(Skill(
                id=s["id"],
                user_id=self.user_id,
                name=s["name"],
                observation=s.get("observation") or "",
                area=s.get("area") or "",
                created_at=self._parse_timestamp(s.get("createdAt")) or datetime.utcnow(),
                updated_at=self._parse_timestamp(s.get("updatedAt")) or datetime.utcnow(),
            ))
            self.stats['skills'] += 1

    async def import_team_members(self, session, records) -> set:
        logger.info(f"Importing {len(records)} team members...")
        ids = set()
        for m in records:
            await session.merge(TeamMember(
                id=m["id"],
                user_id=self.user_id,
                name=m["name"],
                role=m.get("role") or "",
                email=m.get("email") or "",
                phone=m.get("phone") or "",
                address=m.get("address"),
                status=MemberStatus(m.get("status") or MemberStatus.ATIVO.value),
                is_partner=bool(m.get("isPartner")),
                skill_ids=list(m.get("skillIds") or []),
                origin=m.get("origin") or "",
                projects=list(m.get("projects") or []),
                created_at=self._parse_timestamp(m.get("createdAt")) or datetime.utcnow(),
                updated_at=self._parse_timestamp(m.get("updatedAt")) or datetime.utcnow(),
            ))
            ids.add(m["id"])
            self.stats['team_members'] += 1
        return ids

    async def import_tasks(self, session, records, assignee_ids: set):
        logger.info(f"Importing {len(records)} tasks...")
        for t in records:
            try:
                task = self._convert_task(t, assignee_ids)
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping task {t.get('id')}: {e}")
                self.stats['errors'].append(f"Task {t.get('id')}: {e}")
                continue
            await session.merge(task)
            self.stats['tasks'] += 1

    def _convert_task(self, t: Dict[str, Any], assignee_ids: set) -> Task:
        assigned = t.get("assignedPersonId")
        forward_history = [
            {"kind": "forward", **self._rename(entry, FORWARD_KEYS)}
            for entry in t.get("forwardHistory") or []
        ]
        completion_history = [
            {"kind": "completion", **self._rename(entry, COMPLETION_KEYS)}
            for entry in t.get("completionHistory") or []
        ]
        return Task(
            id=t["id"],
            user_id=self.user_id,
            title=t["title"],
            description=t.get("description") or "",
            observations=t.get("observations") or "",
            type=TaskType(t.get("type") or TaskType.OWN_TASK.value),
            priority=TaskPriority(t.get("priority") or TaskPriority.NONE.value),
            time_investment=TimeInvestment(t.get("timeInvestment") or TimeInvestment.LOW.value),
            custom_time_minutes=t.get("customTimeMinutes"),
            category=TaskCategory(t.get("category") or TaskCategory.PERSONAL.value),
            status=TaskStatus(t.get("status") or TaskStatus.PENDING.value),
            scheduled_date=parse_iso_date(t["scheduledDate"]),
            assigned_person_id=assigned if assigned in assignee_ids else None,
            sub_items=list(t.get("subItems") or []),
            order=t.get("order") or 0,
            is_routine=bool(t.get("isRoutine")),
            routine_cycle=RoutineCycle(t["routineCycle"]) if t.get("routineCycle") else None,
            routine_start_date=self._parse_date(t.get("routineStartDate")),
            routine_end_date=self._parse_date(t.get("routineEndDate")),
            include_weekends=t.get("includeWeekends", True),
            is_forwarded=bool(t.get("isForwarded") or forward_history),
            is_concluded=bool(t.get("isConcluded")),
            concluded_at=self._parse_timestamp(t.get("concludedAt") or t.get("completedAt")),
            forward_count=t.get("forwardCount") or 0,
            completion_history=completion_history,
            forward_history=forward_history,
            created_at=self._parse_timestamp(t.get("createdAt")) or datetime.utcnow(),
            updated_at=self._parse_timestamp(t.get("updatedAt")) or datetime.utcnow(),
        )

    def print_summary(self):
        """Print import summary"""
        print("\n" + "=" * 60)
        print("IMPORT SUMMARY")
        print("=" * 60)
        print(f"User:          {self.user_id}")
        print(f"People:        {self.stats['people']}")
        print(f"Skills:        {self.stats['skills']}")
        print(f"Team Members:  {self.stats['team_members']}")
        print(f"Tasks:         {self.stats['tasks']}")

        if self.stats['errors']:
            print(f"\nErrors: {len(self.stats['errors'])}")
            for error in self.stats['errors']:
                print(f"   - {error}")

        print("\nNext step: python scripts/clean_task_history.py", self.user_id)
        print()

    # Helper methods

    @staticmethod
    def _rename(entry: Dict[str, Any], keys: Dict[str, str]) -> Dict[str, Any]:
        return {keys[k]: v for k, v in entry.items() if k in keys}

    @staticmethod
    def _parse_date(value: Optional[str]):
        return parse_iso_date(value) if value else None

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
        except ValueError:
            return None


async def main():
    """Import entry point"""
    if len(sys.argv) < 3:
        print("Error: Missing arguments")
        print("\nUsage:")
        print("  python scripts/import_local_backup.py /path/to/backup.json <user_id>")
        sys.exit(1)

    backup_path, user_id = sys.argv[1], sys.argv[2]

    if not Path(backup_path).exists():
        print(f"Error: Backup not found at {backup_path}")
        sys.exit(1)

    await BackupImport(backup_path, user_id).import_all()


if __name__ == "__main__":
    asyncio.run(main())
