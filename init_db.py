"""Initialize database tables"""
import asyncio
from organizese.database import Base, create_tables
from organizese.models import *  # noqa: F401,F403 - Import all models to register them
from organizese.utils.logger import get_logger

logger = get_logger("init_db")


async def init():
    await create_tables()
    logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    asyncio.run(init())
