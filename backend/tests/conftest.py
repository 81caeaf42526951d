"""
Hackhub - Test Configuration and Fixtures
"""
import os
from types import SimpleNamespace
from typing import AsyncGenerator, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['QR_SECRET'] = 'test-qr-secret-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'

from app.main import app
from app.core.database import Base, get_db
from app.models.user import User, UserRole
from app.models.team import Team
from app.models.cluster import Cluster, ClusterStage
from app.models.college import College
from app.core.security import get_password_hash, create_access_token

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def headers_for(user: User) -> dict:
    """Bearer headers for any user"""
    token = create_access_token({
        'sub': str(user.id),
        'email': user.email,
        'role': user.role.value
    })
    return {'Authorization': f'Bearer {token}'}


async def create_user(
    db: AsyncSession,
    role: UserRole = UserRole.STUDENT,
    password: str = 'testpassword123',
    team: Optional[Team] = None,
    entity_id: Optional[str] = None,
    **fields
) -> User:
    fields.setdefault('is_active', True)
    user = User(
        email=fake.unique.email(),
        hashed_password=get_password_hash(password),
        full_name=fake.name(),
        role=role,
        team_id=team.id if team else None,
        entity_id=entity_id,
        **fields
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_team(
    db: AsyncSession,
    name: Optional[str] = None,
    leader: Optional[User] = None,
    cluster: Optional[Cluster] = None,
    balance=1000000,
    **fields
) -> Team:
    team = Team(
        name=name or fake.unique.company(),
        cluster_id=cluster.id if cluster else None,
        balance=balance,
        **fields
    )
    db.add(team)
    await db.flush()

    if leader:
        team.leader_id = leader.id
        leader.team_id = team.id
        db.add(leader)

    await db.commit()
    await db.refresh(team)
    return team


async def create_cluster(
    db: AsyncSession,
    stage: ClusterStage = ClusterStage.BIDDING,
    bidding_open: bool = True,
    **fields
) -> Cluster:
    cluster = Cluster(
        name=fields.pop('name', None) or f"Cluster {fake.unique.city()}",
        current_stage=stage,
        bidding_open=bidding_open,
        **fields
    )
    db.add(cluster)
    await db.commit()
    await db.refresh(cluster)
    return cluster


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory: ``await make_user(role=..., team=..., entity_id=...)``"""
    async def _make(**kwargs) -> User:
        return await create_user(db_session, **kwargs)
    return _make


@pytest.fixture
def make_team(db_session: AsyncSession):
    """Factory: ``await make_team(name=..., leader=..., cluster=..., balance=...)``"""
    async def _make(**kwargs) -> Team:
        return await create_team(db_session, **kwargs)
    return _make


@pytest.fixture
def make_cluster(db_session: AsyncSession):
    """Factory: ``await make_cluster(stage=..., bidding_open=...)``"""
    async def _make(**kwargs) -> Cluster:
        return await create_cluster(db_session, **kwargs)
    return _make


@pytest.fixture
def auth_for():
    """Bearer headers for an arbitrary user"""
    return headers_for


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user"""
    return await create_user(db_session)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await create_user(db_session, role=UserRole.ADMIN, password='adminpassword123')


@pytest.fixture
async def super_admin_user(db_session: AsyncSession) -> User:
    """Create a super admin test user"""
    return await create_user(db_session, role=UserRole.SUPER_ADMIN)


@pytest.fixture
async def gate_staff_user(db_session: AsyncSession) -> User:
    """Create a gate staff test user"""
    return await create_user(db_session, role=UserRole.GATE_STAFF)


@pytest.fixture
async def onboarded_user(db_session: AsyncSession) -> User:
    """Participant with an entity ID, a college and a team in a cluster"""
    college = College(name="Model Engineering College", location="Kochi")
    db_session.add(college)
    await db_session.commit()

    cluster = await create_cluster(db_session, name="Cluster Alpha", tier="gold")
    team = await create_team(db_session, name="Byte Bandits", cluster=cluster)
    return await create_user(
        db_session,
        entity_id="OF-2026-A7F3",
        team=team,
        college_id=college.id,
        photo_url="https://cdn.example.com/p/a7f3.jpg",
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return headers_for(test_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return headers_for(admin_user)


@pytest.fixture
def super_admin_headers(super_admin_user: User) -> dict:
    return headers_for(super_admin_user)


@pytest.fixture
def gate_headers(gate_staff_user: User) -> dict:
    return headers_for(gate_staff_user)


@pytest.fixture
async def market(db_session: AsyncSession) -> SimpleNamespace:
    """
    One open cluster with three teams of 1,000,000 each.

    t1 is led by ``lead``; ``member`` is a non-lead member of t1.
    """
    cluster = await create_cluster(db_session, name="Cluster Bidding")
    lead = await create_user(db_session, role=UserRole.TEAM_LEAD)
    t1 = await create_team(db_session, name="T1", leader=lead, cluster=cluster)
    t2 = await create_team(db_session, name="T2", cluster=cluster)
    t3 = await create_team(db_session, name="T3", cluster=cluster)
    member = await create_user(db_session, team=t1)
    await db_session.refresh(lead)
    return SimpleNamespace(cluster=cluster, lead=lead, member=member, t1=t1, t2=t2, t3=t3)


@pytest.fixture
def session_factory(db_session: AsyncSession):
    """Independent sessions on the test database, for interleaving transactions"""
    return TestSessionLocal
