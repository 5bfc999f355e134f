"""Explicit per-request session context.

The authenticated identity is resolved once per request by the API layer
and passed into services as a value. It exists from sign-in until sign-out
(or token expiry).
"""

from dataclasses import dataclass
from uuid import UUID

from yafoy.models.user import UserRole


@dataclass(frozen=True)
class SessionContext:
    user_id: UUID
    role: UserRole
    jti: str
    full_name: str | None = None

    @property
    def is_provider(self) -> bool:
        return self.role == UserRole.PROVIDER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
