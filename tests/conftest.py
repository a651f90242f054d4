"""Shared test fixtures and configuration."""
import pytest
import os
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("ULTRAVOX_API_KEY", "test-ultravox-key")
os.environ.setdefault("TOOLS_BASE_URL", "https://tools.example.com")
os.environ.setdefault("TELEPHONY_PROVIDER", "twilio")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "test-sid")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-token")
os.environ.setdefault("TWILIO_PHONE_NUMBER", "+15551110000")
os.environ.setdefault("DESTINATION_PHONE_NUMBER", "+15550000000")
os.environ.setdefault("PBXWARE_API_URL", "https://pbx.example.com/api")
os.environ.setdefault("PBXWARE_API_KEY", "test-pbx-key")
os.environ.setdefault("PBXWARE_SIP_DOMAIN", "pbx.example.com")
os.environ.setdefault("AI_SIP_USERNAME", "ai-agent")
os.environ.setdefault("AI_SIP_PASSWORD", "ai-secret")
os.environ.setdefault("CALCOM_API_KEY", "test-cal-key")
os.environ.setdefault("CALCOM_EVENT_TYPE_ID", "123")
os.environ.setdefault("DEFAULT_TIME_ZONE", "America/Los_Angeles")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STUDENTS_CSV_PATH", "")

from app.main import app
from app.db.database import Base
from app.core.dependencies import (
    get_roster_lookup,
    get_session_registry,
    get_telephony_providers,
    get_ultravox_client,
)
from app.services.call_session.registry import CallSessionRegistry
from app.services.roster.lookup import RosterLookup
from tests.fakes import FakeProvider, FakeUltravox, InMemoryStudentStore, make_student


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def roster_students():
    """Students known to the in-memory roster."""
    return [
        make_student(),
        make_student(
            student_code="S002",
            first_name="Sam",
            last_name="Lee",
            email="sam.lee@example.com",
            phone="+15552223333",
            emergency_contact="Ana Lee",
            emergency_contact_phone=None,
        ),
        make_student(
            student_code="S003",
            first_name="Ada",
            last_name="King",
            email="ada.king@example.com",
            phone="+15553334444",
        ),
    ]


@pytest.fixture
def roster(roster_students):
    """Roster lookup over the in-memory students."""
    return RosterLookup(InMemoryStudentStore(roster_students))


@pytest.fixture
def registry():
    """Fresh call session registry."""
    return CallSessionRegistry(default_time_zone="America/Los_Angeles")


@pytest.fixture
def twilio_provider():
    return FakeProvider("twilio")


@pytest.fixture
def pbxware_provider():
    return FakeProvider("pbxware")


@pytest.fixture
def providers(twilio_provider, pbxware_provider):
    return {"twilio": twilio_provider, "pbxware": pbxware_provider}


@pytest.fixture
def ultravox():
    return FakeUltravox()


@pytest.fixture
def test_client(registry, providers, ultravox, roster):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[get_telephony_providers] = lambda: providers
    app.dependency_overrides[get_ultravox_client] = lambda: ultravox
    app.dependency_overrides[get_roster_lookup] = lambda: roster

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def override_dependency():
    """Override a single app dependency for the duration of a test."""
    def _override(dependency, value):
        app.dependency_overrides[dependency] = lambda: value
    return _override
