"""User service for registration and authentication."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.exceptions import ConflictError
from yafoy.core.security import get_password_hash, verify_password
from yafoy.models.user import User
from yafoy.schemas.user import UserRegister

EMAIL_TAKEN_MESSAGE = "Cette adresse e-mail est déjà utilisée."


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        result = await self.db.execute(select(User).where(User.user_id == user_id))
        return result.scalar_one_or_none()

    async def create_user(self, user_data: UserRegister) -> User:
        """Create a new client or provider account.

        Args:
            user_data: User registration data

        Returns:
            Created user

        Raises:
            ConflictError: If email already exists
        """
        existing = await self.get_by_email(user_data.email)
        if existing:
            raise ConflictError("EMAIL_TAKEN", EMAIL_TAKEN_MESSAGE)

        user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            phone=user_data.phone,
            role=user_data.role,
            status="active",
        )

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("EMAIL_TAKEN", EMAIL_TAKEN_MESSAGE)

    async def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate user by email and password.

        Returns:
            User if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        if user.status != "active":
            return None
        return user
