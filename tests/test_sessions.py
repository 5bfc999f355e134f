"""Tests for sign-in sessions and the Redis primitives behind them."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

import yafoy.services as services
from yafoy.api.deps import get_redis_service
from yafoy.core.security import create_access_token, decode_access_token
from yafoy.models.user import UserRole
from yafoy.services.session_service import SessionService


class TestRedisSessionOperations:
    """Test Redis session records."""

    @pytest.mark.asyncio
    async def test_store_session_sets_ttl(self, redis_service, mock_redis):
        await redis_service.store_session("jti-1", {"user_id": "u1", "full_name": None}, ttl=3600)

        pipe = mock_redis.pipeline.return_value
        pipe.hset.assert_called_once_with("session:jti-1", mapping={"user_id": "u1", "full_name": ""})
        pipe.expire.assert_called_once_with("session:jti-1", 3600)
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_session_is_none(self, redis_service, mock_redis):
        mock_redis.hgetall = AsyncMock(return_value={})
        assert await redis_service.get_session("gone") is None

    @pytest.mark.asyncio
    async def test_delete_session(self, redis_service, mock_redis):
        assert await redis_service.delete_session("jti-1") is True
        mock_redis.delete.assert_awaited_once_with("session:jti-1")


class TestRedisLocks:
    @pytest.mark.asyncio
    async def test_acquire_lock(self, redis_service, mock_redis):
        acquired, owner = await redis_service.acquire_lock("order:o1", ttl=10)

        assert acquired is True
        mock_redis.set.assert_awaited_once_with("lock:order:o1", owner, nx=True, ex=10)

    @pytest.mark.asyncio
    async def test_lock_busy(self, redis_service, mock_redis):
        mock_redis.set = AsyncMock(return_value=None)

        acquired, _ = await redis_service.acquire_lock("order:o1")

        assert acquired is False

    @pytest.mark.asyncio
    async def test_release_checks_owner(self, redis_service, mock_redis):
        assert await redis_service.release_lock("order:o1", "owner-1") is True

        script = mock_redis.register_script.return_value
        script.assert_awaited_once_with(keys=["lock:order:o1"], args=["owner-1"])


class TestConfirmationTokens:
    @pytest.mark.asyncio
    async def test_issue_and_consume(self, redis_service, mock_redis):
        token = await redis_service.issue_confirmation_token("order_cancel:o1", ttl=300)

        mock_redis.set.assert_awaited_once_with("confirm:order_cancel:o1", token, ex=300)
        assert await redis_service.consume_confirmation_token("order_cancel:o1", token) is True

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, redis_service):
        first = await redis_service.issue_confirmation_token("k", ttl=60)
        second = await redis_service.issue_confirmation_token("k", ttl=60)
        assert first != second


class TestSessionService:
    """Test sign-in, resolution and sign-out."""

    @pytest.mark.asyncio
    async def test_sign_in_records_session(self, redis_service, mock_redis):
        user = SimpleNamespace(user_id=uuid4(), role="provider", full_name="Prestataire Test")
        service = SessionService(redis_service)

        token = await service.sign_in(user)

        assert token.role == "provider"
        payload = decode_access_token(token.access_token)
        assert payload["sub"] == str(user.user_id)
        pipe = mock_redis.pipeline.return_value
        pipe.hset.assert_called_once_with(
            f"session:{payload['jti']}",
            mapping={"user_id": str(user.user_id), "role": "provider", "full_name": "Prestataire Test"},
        )

    @pytest.mark.asyncio
    async def test_resolve_live_session(self, redis_service, mock_redis):
        user_id = uuid4()
        token = create_access_token(data={"sub": str(user_id), "role": "client"})
        mock_redis.hgetall = AsyncMock(
            return_value={"user_id": str(user_id), "role": "client", "full_name": "Client Test"}
        )
        service = SessionService(redis_service)

        session = await service.resolve(token)

        assert session.user_id == user_id
        assert session.role == UserRole.CLIENT
        assert session.full_name == "Client Test"
        assert not session.is_provider

    @pytest.mark.asyncio
    async def test_resolve_signed_out_session(self, redis_service, mock_redis):
        token = create_access_token(data={"sub": str(uuid4()), "role": "client"})
        mock_redis.hgetall = AsyncMock(return_value={})
        service = SessionService(redis_service)

        assert await service.resolve(token) is None

    @pytest.mark.asyncio
    async def test_resolve_garbage_token(self, redis_service):
        service = SessionService(redis_service)
        assert await service.resolve("not-a-jwt") is None

    @pytest.mark.asyncio
    async def test_sign_out_deletes_record(self, redis_service, mock_redis, provider_session):
        service = SessionService(redis_service)

        await service.sign_out(provider_session)

        mock_redis.delete.assert_awaited_once_with(f"session:{provider_session.jti}")


class TestRedisServiceDependency:
    @pytest.mark.asyncio
    async def test_wraps_shared_client(self, mock_redis):
        with patch("yafoy.api.deps.get_redis", new=AsyncMock(return_value=mock_redis)):
            service = await get_redis_service()

        assert service.redis is mock_redis

    def test_single_factory(self):
        """Request handlers get RedisService only through the API dependency."""
        assert services.__all__ == ["RedisService"]
        assert not hasattr(services.redis_service, "get_redis_service")
