import sys
import os
import pytest
from decimal import Decimal
from typing import AsyncGenerator

# Add the backend directory to the Python path
# This is necessary for pytest to find the 'main' module and other packages
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# Settings are read at import time
os.environ["ENVIRONMENT"] = "local"
os.environ["SECRET_KEY"] = "test-secret-key-for-negotiation-tests-0123456789"
os.environ["LOG_LEVEL"] = "WARNING"

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.database import Base, db_manager
from core.utils.auth.jwt_auth import jwt_manager
from models.product import Product
from models.shop import Shop
from models.user import User, CONSUMER_ROLE, SHOP_OWNER_ROLE
from services.fanout import NotificationFanout
from services.negotiation import NegotiationResolver

TEST_POSTGRES_DB_URL = "sqlite+aiosqlite:///:memory:"


class RecordingChannel:
    """Push channel double that records every room send."""

    def __init__(self, fail_rooms=()):
        self.sent = []
        self.fail_rooms = set(fail_rooms)

    async def send_to_room(self, room, message):
        if room in self.fail_rooms:
            raise ConnectionError(f"room {room} unreachable")
        self.sent.append((room, message))
        return 1

    def messages_for(self, room):
        return [message for sent_room, message in self.sent if sent_room == room]


@pytest.fixture
async def async_engine():
    engine = create_async_engine(
        TEST_POSTGRES_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(async_engine):
    factory = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    # Initialize the global database objects for the application
    db_manager.set_engine_and_session_factory(async_engine, factory)
    yield factory
    db_manager.set_engine_and_session_factory(None, None)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _persist(session_factory, instance):
    async with session_factory() as session:
        session.add(instance)
        await session.commit()
        await session.refresh(instance)
    return instance


@pytest.fixture
async def consumer(session_factory) -> User:
    return await _persist(session_factory, User(name="Ada Buyer", email="ada@example.com", role=CONSUMER_ROLE))


@pytest.fixture
async def other_consumer(session_factory) -> User:
    return await _persist(session_factory, User(name="Ben Buyer", email="ben@example.com", role=CONSUMER_ROLE))


@pytest.fixture
async def shop_owner(session_factory) -> User:
    return await _persist(session_factory, User(name="Sam Seller", email="sam@example.com", role=SHOP_OWNER_ROLE))


@pytest.fixture
async def shop(session_factory, shop_owner) -> Shop:
    return await _persist(session_factory, Shop(shop_name="Sam's Goods", owner_id=shop_owner.id))


@pytest.fixture
async def product(session_factory, shop) -> Product:
    return await _persist(session_factory, Product(
        name="Walnut Desk",
        selling_price=Decimal("100.00"),
        min_negotiable_price=Decimal("80.00"),
        shop_id=shop.id,
    ))


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def fanout(channel) -> NotificationFanout:
    return NotificationFanout(channel)


@pytest.fixture
def resolver(session_factory, fanout) -> NegotiationResolver:
    return NegotiationResolver(session_factory, fanout)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = jwt_manager.create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
async def client(session_factory, channel, fanout) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, without running its lifespan."""
    app.state.push_channel = channel
    app.state.notification_fanout = fanout
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await fanout.drain()
