"""Test configuration and fixtures."""

import os
import tempfile

# Settings are read at import time, so configure them before the app loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ENABLE_WORKERS", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="tourism-uploads-"))

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tourism_api.core.database import Base, get_db, utcnow  # noqa: E402
from tourism_api.core.security import create_access_token  # noqa: E402
from tourism_api.models import *  # noqa: E402,F403 - Import all models
from tourism_api.schemas.user import RegisterRequest  # noqa: E402
from tourism_api.services.equipment_service import EquipmentService  # noqa: E402
from tourism_api.services.tour_service import TourService  # noqa: E402
from tourism_api.services.user_service import UserService  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

VALID_CARD = {
    "card_number": "4111 1111 1111 1234",
    "card_holder": "Jane Traveller",
    "expiry_date": "12/99",
    "cvv": "123",
}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create the application with its database dependency bound to the test session."""
    from tourism_api.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def auth_headers(user) -> dict[str, str]:
    token = create_access_token(user.id, user.username, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


async def _register(session, username: str, role: str = "user"):
    user, _ = await UserService(session).register(RegisterRequest(
        username=username,
        email=f"{username}@example.com",
        password="secret123",
        role=role,
    ))
    return user


@pytest_asyncio.fixture
async def customer(test_session):
    return await _register(test_session, "jane")


@pytest_asyncio.fixture
async def other_customer(test_session):
    return await _register(test_session, "john")


@pytest_asyncio.fixture
async def admin(test_session):
    return await _register(test_session, "boss", role="admin")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest_asyncio.fixture
async def tour(test_session):
    return await TourService(test_session).create_tour(
        name="Ella Rock Sunrise Hike",
        description="Early morning hike to the summit of Ella Rock",
        location="Ella",
        price=150.0,
        duration=2,
        date=utcnow() + timedelta(days=30),
        image="/uploads/tours/ella.jpg",
    )


@pytest_asyncio.fixture
async def equipment(test_session, admin):
    return await EquipmentService(test_session).create_equipment(
        name="Two-Person Dome Tent",
        description="Waterproof tent with a vestibule",
        price=20.0,
        performed_by=admin.username,
        quantity=10,
        category="Tents",
    )


@pytest.fixture
def card():
    return dict(VALID_CARD)


@pytest.fixture
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
