"""Sign-in sessions backed by JWT access tokens and Redis session records."""

import logging
from uuid import UUID

from yafoy.core.config import settings
from yafoy.core.security import create_access_token, decode_access_token
from yafoy.core.session import SessionContext
from yafoy.models.user import User, UserRole
from yafoy.schemas.user import TokenResponse
from yafoy.services.redis_service import RedisService

logger = logging.getLogger(__name__)


class SessionService:
    """Creates, resolves and ends sessions."""

    def __init__(self, redis_service: RedisService):
        self.redis_service = redis_service

    async def sign_in(self, user: User) -> TokenResponse:
        """Issue a token for an authenticated user and record the session."""
        expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        role = UserRole(user.role).value
        token = create_access_token(data={"sub": str(user.user_id), "role": role})
        payload = decode_access_token(token)
        await self.redis_service.store_session(
            payload["jti"],
            {
                "user_id": str(user.user_id),
                "role": role,
                "full_name": user.full_name,
            },
            ttl=expires_in,
        )
        logger.info(f"Session started: user={user.user_id}")
        return TokenResponse(access_token=token, expires_in=expires_in, role=role)

    async def resolve(self, token: str) -> SessionContext | None:
        """Resolve a bearer token into a session context.

        Returns None when the token is invalid, expired or signed out.
        """
        payload = decode_access_token(token)
        if payload is None:
            return None

        jti = payload.get("jti")
        if not jti:
            return None

        record = await self.redis_service.get_session(jti)
        if record is None:
            return None

        try:
            return SessionContext(
                user_id=UUID(record["user_id"]),
                role=UserRole(record["role"]),
                jti=jti,
                full_name=record.get("full_name") or None,
            )
        except (KeyError, ValueError):
            logger.warning(f"Discarding malformed session record {jti}")
            return None

    async def sign_out(self, session: SessionContext) -> bool:
        ended = await self.redis_service.delete_session(session.jti)
        logger.info(f"Session ended: user={session.user_id}")
        return ended
