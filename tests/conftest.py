"""Pytest configuration and fixtures for testing."""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from yafoy.core.session import SessionContext
from yafoy.models.order import OrderStatus
from yafoy.models.user import UserRole
from yafoy.services.redis_service import RedisService


# Mock Redis client fixture
@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client."""
    redis = AsyncMock()

    # Mock common Redis operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.hset = AsyncMock(return_value=1)
    redis.hgetall = AsyncMock(return_value={})
    redis.expire = AsyncMock(return_value=True)

    # Lua scripts: compare-and-delete succeeds by default
    redis.register_script = MagicMock(return_value=AsyncMock(return_value=1))

    # Pipelines queue commands synchronously and execute once
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    redis.pipeline = MagicMock(return_value=pipe)

    return redis


@pytest.fixture
def redis_service(mock_redis: AsyncMock) -> RedisService:
    return RedisService(mock_redis)


# Mock database session fixture
@pytest.fixture
def mock_db() -> AsyncMock:
    """Create a mock async database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    return db


def make_session(role: UserRole = UserRole.CLIENT, full_name: str = "Test User") -> SessionContext:
    return SessionContext(user_id=uuid4(), role=role, jti=uuid4().hex, full_name=full_name)


@pytest.fixture
def provider_session() -> SessionContext:
    return make_session(UserRole.PROVIDER, "Prestataire Test")


@pytest.fixture
def client_session() -> SessionContext:
    return make_session(UserRole.CLIENT, "Client Test")


# Mock order fixture
@pytest.fixture
def mock_order(provider_session: SessionContext, client_session: SessionContext) -> MagicMock:
    """Create a pending order between the client and provider sessions."""
    order = MagicMock()
    order.order_id = uuid4()
    order.client_id = client_session.user_id
    order.provider_id = provider_session.user_id
    order.total_amount = Decimal("150000.00")
    order.deposit_paid = Decimal("45000.00")
    order.event_date = date(2026, 12, 5)
    order.event_location = "Dakar"
    order.notes = None
    order.status = OrderStatus.PENDING.value
    order.created_at = datetime(2026, 10, 1, 12, 0, 0)
    order.updated_at = datetime(2026, 10, 1, 12, 0, 0)
    return order


def scalar_result(value) -> MagicMock:
    """Result object whose scalar_one_or_none / scalar_one return ``value``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    return result
