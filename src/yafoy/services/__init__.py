"""Business logic services."""

from yafoy.services.redis_service import RedisService

__all__ = [
    "RedisService",
]
