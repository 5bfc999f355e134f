"""Authentication API endpoints."""

from fastapi import APIRouter, HTTPException, status

from yafoy.api.deps import CurrentSession, DbSession, SessionServiceDep, http_error
from yafoy.core.exceptions import ServiceError
from yafoy.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse
from yafoy.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: DbSession):
    """Register a new client or provider.

    Raises:
        409: Email already registered
    """
    user_service = UserService(db)

    try:
        user = await user_service.create_user(user_data)
    except ServiceError as e:
        raise http_error(e)

    return user


@router.post("/login", response_model=TokenResponse)
async def login(user_data: UserLogin, db: DbSession, session_service: SessionServiceDep):
    """Sign in and get an access token.

    The session lives in Redis for the lifetime of the token and ends at
    sign-out.

    Raises:
        401: Invalid credentials
    """
    user_service = UserService(db)
    user = await user_service.authenticate(user_data.email, user_data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_CREDENTIALS", "message": "E-mail ou mot de passe incorrect."},
            headers={"WWW-Authenticate": "Bearer"},
        )

    return await session_service.sign_in(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(session: CurrentSession, session_service: SessionServiceDep):
    """End the current session. The token is rejected afterwards."""
    await session_service.sign_out(session)


@router.get("/me", response_model=UserResponse)
async def get_me(session: CurrentSession, db: DbSession):
    """Get current user information."""
    user = await UserService(db).get_by_id(session.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "USER_NOT_FOUND", "message": "Utilisateur introuvable."},
        )
    return user
