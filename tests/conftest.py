"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite file so that separate sessions hold separate
connections: concurrent issuance tests then race through real transactions
the same way two API workers would.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["NOTIFICATIONS_ENABLED"] = "true"
os.environ["PAYMENT_GATEWAY"] = "offline"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from ticketing.main import app
from ticketing.db.base import Base
from ticketing.db.session import get_db
from ticketing.core.config import get_settings
from ticketing.core.security import create_access_token, hash_password
from ticketing.models.user import User, UserRole
from ticketing.models.event import Event
from ticketing.services.gateway_factory import get_gateway
from ticketing.services.interfaces.notifier import TicketNotifier
from ticketing.services.interfaces.offline_gateway import OfflineGateway
from ticketing.services.notification_service import NotificationDispatcher, get_dispatcher
from ticketing.services.payment_proof import sign_payment

settings = get_settings()


class RecordingNotifier(TicketNotifier):
    """Collects deliveries instead of sending email."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send(self, recipient, event_summary, tickets) -> bool:
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append((recipient, event_summary, tickets))
        return True


@pytest.fixture
def sign():
    """Signs like the gateway does after checkout."""

    def _sign(order_id: str, payment_id: str) -> str:
        return sign_payment(order_id, payment_id, settings.PAYMENT_KEY_SECRET)

    return _sign


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ticketing.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def dispatcher(notifier) -> AsyncGenerator[NotificationDispatcher, None]:
    dispatcher = NotificationDispatcher(notifier, enabled=True)
    yield dispatcher
    await dispatcher.drain()


@pytest_asyncio.fixture
async def client(session_factory, dispatcher) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with a fresh test-database session per request."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_gateway] = lambda: OfflineGateway(key_id=settings.PAYMENT_KEY_ID)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _persist(session_factory, obj):
    """Commit ``obj`` in a throwaway session and hand it back detached."""
    async with session_factory() as session:
        session.add(obj)
        await session.commit()
        await session.refresh(obj)
    return obj


async def _make_user(session_factory, email: str, name: str, role: UserRole) -> User:
    return await _persist(
        session_factory,
        User(
            email=email,
            name=name,
            role=role.value,
            hashed_password=hash_password("testpassword123"),
        ),
    )


@pytest_asyncio.fixture
async def fan(session_factory) -> User:
    return await _make_user(session_factory, "fan@example.com", "Fan One", UserRole.FAN)


@pytest_asyncio.fixture
async def other_fan(session_factory) -> User:
    return await _make_user(session_factory, "fan2@example.com", "Fan Two", UserRole.FAN)


@pytest_asyncio.fixture
async def organizer(session_factory) -> User:
    return await _make_user(session_factory, "org@example.com", "Org One", UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def other_organizer(session_factory) -> User:
    return await _make_user(session_factory, "org2@example.com", "Org Two", UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def artist(session_factory) -> User:
    return await _make_user(session_factory, "artist@example.com", "Artist One", UserRole.ARTIST)


@pytest.fixture
def make_fans(session_factory):
    async def _make_fans(count: int) -> list[User]:
        return [
            await _make_user(session_factory, f"crowd{i}@example.com", f"Crowd {i}", UserRole.FAN)
            for i in range(count)
        ]

    return _make_fans


def _headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return _headers_for


@pytest.fixture
def fan_headers(fan) -> dict:
    return _headers_for(fan)


@pytest.fixture
def organizer_headers(organizer) -> dict:
    return _headers_for(organizer)


async def _make_event(
    session_factory,
    organizer: User,
    *,
    price: str = "0",
    capacity=100,
    title: str = "Test Gig",
    allow_artist_applications: bool = False,
) -> Event:
    return await _persist(
        session_factory,
        Event(
            title=title,
            description="A test event",
            date=datetime.now(timezone.utc) + timedelta(days=30),
            location="Test Venue",
            price=Decimal(price),
            capacity=capacity,
            tickets_issued=0,
            allow_artist_applications=allow_artist_applications,
            organizer_id=organizer.id,
            organizer_name=organizer.name,
        ),
    )


@pytest.fixture
def make_event(session_factory, organizer):
    async def _factory(**kwargs) -> Event:
        return await _make_event(session_factory, kwargs.pop("owner", organizer), **kwargs)

    return _factory


@pytest_asyncio.fixture
async def free_event(session_factory, organizer) -> Event:
    """Free event with 100 places."""
    return await _make_event(session_factory, organizer, allow_artist_applications=True)


@pytest_asyncio.fixture
async def paid_event(session_factory, organizer) -> Event:
    """Paid event, 250.00 per ticket, 10 places."""
    return await _make_event(session_factory, organizer, price="250.00", capacity=10, title="Paid Gig")
