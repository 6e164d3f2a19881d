"""
Task history cleanup

Drops completion entries dated on a day other than the task's scheduled date
and recomputes their was_forwarded flag from the forward log. Safe to run
repeatedly; a second run reports 0 updated tasks.

Usage:
    python scripts/clean_task_history.py            # every user
    python scripts/clean_task_history.py <user_id>  # one user
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from organizese.database import AsyncSessionLocal, engine, create_tables
from organizese.services.data_cleaner import clean_inconsistent_task_data
from organizese.utils.logger import configure_logging, get_logger

logger = get_logger("clean_task_history")


async def main():
    user_id = sys.argv[1] if len(sys.argv) > 1 else None
    configure_logging()

    await create_tables()

    async with AsyncSessionLocal() as session:
        updated = await clean_inconsistent_task_data(session, user_id=user_id)

    scope = f"user {user_id}" if user_id else "all users"
    logger.info(f"Done ({scope}): {updated} tasks updated")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
