"""API dependencies for sessions, database access and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.database import get_db
from yafoy.core.exceptions import ServiceError
from yafoy.core.redis import get_redis
from yafoy.core.session import SessionContext
from yafoy.models.user import UserRole
from yafoy.services.completion_client import CompletionClient, get_completion_client
from yafoy.services.redis_service import RedisService
from yafoy.services.session_service import SessionService
from yafoy.services.storage_service import StorageService, get_storage_service

security = HTTPBearer()


def http_error(error: ServiceError) -> HTTPException:
    """Translate a service error into an HTTP error with ``{code, message}`` detail."""
    return HTTPException(status_code=error.status_code, detail=error.to_detail())


async def get_redis_service() -> RedisService:
    """Get RedisService instance with shared Redis connection pool."""
    redis = await get_redis()
    return RedisService(redis)


async def get_session_service(
    redis_service: Annotated[RedisService, Depends(get_redis_service)],
) -> SessionService:
    return SessionService(redis_service)


async def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    session_service: Annotated[SessionService, Depends(get_session_service)],
) -> SessionContext:
    """Resolve the bearer token into the caller's session.

    Raises:
        HTTPException: 401 if the token is invalid, expired or signed out
    """
    session = await session_service.resolve(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_SESSION", "message": "Session invalide ou expirée."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


async def get_provider_session(
    session: Annotated[SessionContext, Depends(get_current_session)],
) -> SessionContext:
    """Get current session and verify it belongs to a provider."""
    if session.role not in (UserRole.PROVIDER, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "PROVIDER_REQUIRED", "message": "Réservé aux prestataires."},
        )
    return session


async def get_admin_session(
    session: Annotated[SessionContext, Depends(get_current_session)],
) -> SessionContext:
    """Get current session and verify it belongs to an admin."""
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "ADMIN_REQUIRED", "message": "Réservé aux administrateurs."},
        )
    return session


# Type aliases for cleaner dependency injection
CurrentSession = Annotated[SessionContext, Depends(get_current_session)]
ProviderSession = Annotated[SessionContext, Depends(get_provider_session)]
AdminSession = Annotated[SessionContext, Depends(get_admin_session)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisServiceDep = Annotated[RedisService, Depends(get_redis_service)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
CompletionClientDep = Annotated[CompletionClient, Depends(get_completion_client)]
StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
