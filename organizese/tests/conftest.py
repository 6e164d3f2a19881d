"""
Test fixtures - in-memory SQLite database + session-scoped HTTP client
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from organizese.database import Base, get_db
from organizese.main import app
from organizese.models.person import Person
from organizese.models.skill import Skill
from organizese.models.team_member import TeamMember

TEST_USER = "user-test-1"
OTHER_USER = "user-test-2"


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline directory data for the test user"""
    ana = Person(user_id=TEST_USER, name="Ana Souza", role="Designer", contact="ana@example.com")
    python_skill = Skill(user_id=TEST_USER, name="Python", area="Backend")
    bruno = TeamMember(user_id=TEST_USER, name="Bruno Lima", role="Developer", email="bruno@example.com")

    db_session.add_all([ana, python_skill, bruno])
    await db_session.commit()
    await db_session.refresh(ana)
    await db_session.refresh(python_skill)
    await db_session.refresh(bruno)

    return {"person": ana, "skill": python_skill, "member": bruno}


@pytest_asyncio.fixture()
async def client(db_session, seed_data):
    """httpx AsyncClient carrying the test user's session header"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        ac.headers["X-User-Id"] = TEST_USER
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauth_client(db_session):
    """httpx AsyncClient without a session header"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
