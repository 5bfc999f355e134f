"""Redis service for sessions, per-resource locks and confirmation tokens."""

import secrets
import uuid
from typing import Any

from redis.asyncio import Redis


class RedisService:
    """Service class for Redis operations."""

    # Lua script for compare-and-delete (only delete a key holding our value)
    COMPARE_AND_DELETE_SCRIPT = """
    if redis.call("GET", KEYS[1]) == ARGV[1] then
        return redis.call("DEL", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis: Redis):
        """Initialize Redis service with a Redis client.

        Args:
            redis: Async Redis client instance
        """
        self.redis = redis
        self._compare_and_delete_script = None

    async def _get_compare_and_delete_script(self):
        """Get or register the compare-and-delete Lua script."""
        if self._compare_and_delete_script is None:
            self._compare_and_delete_script = self.redis.register_script(
                self.COMPARE_AND_DELETE_SCRIPT
            )
        return self._compare_and_delete_script

    async def _compare_and_delete(self, key: str, value: str) -> bool:
        script = await self._get_compare_and_delete_script()
        result = await script(keys=[key], args=[value])
        return int(result) == 1

    # ==================== Session Operations ====================

    async def store_session(self, jti: str, data: dict[str, Any], ttl: int) -> None:
        """Store a sign-in session record.

        Key pattern: session:{jti}

        Args:
            jti: Token identifier
            data: Session data (values are converted to strings)
            ttl: Lifetime in seconds, aligned with the token expiry
        """
        key = f"session:{jti}"
        string_data = {k: "" if v is None else str(v) for k, v in data.items()}
        pipe = self.redis.pipeline()
        pipe.hset(key, mapping=string_data)
        pipe.expire(key, ttl)
        await pipe.execute()

    async def get_session(self, jti: str) -> dict[str, str] | None:
        """Get a session record, or None once signed out or expired."""
        data = await self.redis.hgetall(f"session:{jti}")
        return data if data else None

    async def delete_session(self, jti: str) -> bool:
        """Delete a session record (sign-out).

        Returns:
            True if a session was deleted
        """
        result = await self.redis.delete(f"session:{jti}")
        return result > 0

    # ==================== Lock Operations ====================

    async def acquire_lock(
        self, resource: str, owner_id: str | None = None, ttl: int = 2
    ) -> tuple[bool, str]:
        """Acquire a lock on a resource.

        Key pattern: lock:{resource}
        Uses SET NX EX for atomic acquisition; the TTL bounds how long a
        crashed holder can block others.

        Args:
            resource: Resource name, e.g. ``order:{order_id}``
            owner_id: Unique identifier for lock owner (auto-generated if None)
            ttl: Lock timeout in seconds

        Returns:
            Tuple of (success, owner_id)
        """
        key = f"lock:{resource}"
        if owner_id is None:
            owner_id = str(uuid.uuid4())

        acquired = await self.redis.set(key, owner_id, nx=True, ex=ttl)
        return (bool(acquired), owner_id)

    async def release_lock(self, resource: str, owner_id: str) -> bool:
        """Release a lock (only if owner matches).

        Returns:
            True if lock was released, False if not owner or not locked
        """
        return await self._compare_and_delete(f"lock:{resource}", owner_id)

    # ==================== Confirmation Tokens ====================

    async def issue_confirmation_token(self, key: str, ttl: int) -> str:
        """Issue a single-use token for a destructive action.

        A new token replaces any previous one for the same key.
        """
        token = secrets.token_urlsafe(16)
        await self.redis.set(f"confirm:{key}", token, ex=ttl)
        return token

    async def consume_confirmation_token(self, key: str, token: str) -> bool:
        """Consume a token if it matches. A wrong token leaves it in place."""
        return await self._compare_and_delete(f"confirm:{key}", token)
