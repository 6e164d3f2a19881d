"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from organizese.config import get_settings
from organizese.database import engine, create_tables
from organizese.models import Task, Person, Skill, TeamMember, TaskShare  # noqa: F401 - register tables
from organizese.api import tasks, people, skills, team_members, shares
from organizese.utils.logger import configure_logging

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Database tables created")

    yield

    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
app.include_router(people.router, prefix="/api/people", tags=["People"])
app.include_router(skills.router, prefix="/api/skills", tags=["Skills"])
app.include_router(team_members.router, prefix="/api/team-members", tags=["Team Members"])
app.include_router(shares.router, prefix="/api/shares", tags=["Task Shares"])


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "organizese.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
