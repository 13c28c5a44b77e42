"""
Test configuration and fixtures
In-memory SQLite per test, shared by the services and the HTTP client
"""

import os
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

# Set test environment before anything reads settings
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-with-at-least-32-chars"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from eventhub.core.database import Base, enable_sqlite_foreign_keys
from eventhub.core.security import AuthContext, create_user_token, get_password_hash
from eventhub.models import User, UserRole, Venue, Event

TEST_PASSWORD = "TestPass123!"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest_asyncio.fixture(scope="function")
async def test_db():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = async_sessionmaker(
        test_db,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest_asyncio.fixture
async def client(db_session):
    """Test client whose requests all run on the test session"""
    from eventhub.main import app
    from eventhub.core.database import get_session

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def create_user(db_session, role: UserRole = UserRole.CUSTOMER, **overrides) -> User:
    user = User(
        email=overrides.pop("email", f"{role.value}_{uuid4().hex[:8]}@example.com"),
        password_hash=_PASSWORD_HASH,
        full_name=overrides.pop("full_name", f"Test {role.value.title()}"),
        phone="+1234567890",
        role=role,
        loyalty_points=overrides.pop("loyalty_points", 0),
        is_active=True,
        **overrides
    )
    db_session.add(user)
    await db_session.commit()
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest_asyncio.fixture
async def customer(db_session):
    return await create_user(db_session, UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def other_customer(db_session):
    return await create_user(db_session, UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def organizer(db_session):
    return await create_user(db_session, UserRole.ORGANIZER, company="Test Promotions")


@pytest_asyncio.fixture
async def other_organizer(db_session):
    return await create_user(db_session, UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def admin(db_session):
    return await create_user(db_session, UserRole.ADMIN)


@pytest.fixture
def customer_ctx(customer):
    return AuthContext.for_user(customer)


@pytest.fixture
def organizer_ctx(organizer):
    return AuthContext.for_user(organizer)


@pytest.fixture
def admin_ctx(admin):
    return AuthContext.for_user(admin)


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_customer_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def organizer_headers(organizer):
    return auth_headers(organizer)


@pytest.fixture
def other_organizer_headers(other_organizer):
    return auth_headers(other_organizer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest_asyncio.fixture
async def venue(db_session):
    venue = Venue(
        name="Test Arena",
        location="Test City",
        address="123 Test Street",
        capacity=500
    )
    db_session.add(venue)
    await db_session.commit()
    return venue


@pytest_asyncio.fixture
async def make_event(db_session, venue, organizer):
    """Factory for events owned by the organizer fixture"""

    async def _make_event(
        title: str = "Test Concert",
        ticket_price: Decimal = Decimal("40.00"),
        total_tickets: int = 100,
        available_tickets: int = None,
        days_ahead: int = 30,
        category: str = "Music",
        is_active: bool = True,
    ) -> Event:
        event = Event(
            title=title,
            description=f"Description for {title}",
            category=category,
            starts_at=datetime.now(timezone.utc) + timedelta(days=days_ahead),
            ticket_price=ticket_price,
            total_tickets=total_tickets,
            available_tickets=total_tickets if available_tickets is None else available_tickets,
            is_active=is_active,
            venue_id=venue.id,
            organizer_id=organizer.id,
        )
        db_session.add(event)
        await db_session.commit()
        return event

    return _make_event


@pytest_asyncio.fixture
async def event(make_event):
    return await make_event()
