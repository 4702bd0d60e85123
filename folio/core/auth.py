"""
Authentication and Authorization

Provides FastAPI dependencies for authentication and authorization.
Bearer credentials only name a user; the role and active flag are always
read from the database.
"""

import logging
from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from folio.core.database import DbSession
from folio.core.security import decode_credential
from folio.models.enums import UserRole
from folio.repositories.user import UserRepository

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)

BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


@dataclass
class UserPrincipal:
    """
    Authenticated user principal.

    Represents an authenticated user with their identity and role.
    """

    user_id: UUID
    username: str
    email: str
    role: UserRole = UserRole.USER
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        """Check if user can moderate content (Admin or above)."""
        return self.role.at_least(UserRole.ADMIN)


async def load_principal(db: AsyncSession, token: str | None) -> UserPrincipal | None:
    """
    Resolve a bearer credential to a principal.

    Args:
        db: Database session
        token: Raw credential

    Returns:
        UserPrincipal, or None if the credential does not name a known user
    """
    user_id_str = decode_credential(token)
    if user_id_str is None:
        return None

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        return None

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        logger.debug(f"Credential names unknown user {user_id}")
        return None

    return UserPrincipal(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
    )


async def get_current_user_optional(
    credentials: BearerCredentials,
    db: DbSession,
) -> UserPrincipal | None:
    """
    Get the current user from the bearer credential (optional).

    Returns None if no credential is provided or it is unusable.
    Does not raise an exception for unauthenticated requests.
    """
    if credentials is None:
        return None
    return await load_principal(db, credentials.credentials)


async def get_current_user(
    user: Annotated[UserPrincipal | None, Depends(get_current_user_optional)],
) -> UserPrincipal:
    """
    Get the current user (required).

    Raises:
        HTTPException: If not authenticated
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(
    user: Annotated[UserPrincipal, Depends(get_current_user)],
) -> UserPrincipal:
    """
    Get the current active user.

    Raises:
        HTTPException: If user is inactive
    """
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


def require_role(min_role: UserRole):
    """
    Dependency factory that checks if user has minimum required role.

    Role hierarchy (lowest to highest): USER < ADMIN < SYSTEM_ADMIN < SUPER_ADMIN

    Args:
        min_role: Minimum role required to access the endpoint

    Returns:
        Dependency function that validates user role
    """

    async def check_role(
        user: Annotated[UserPrincipal, Depends(get_current_active_user)],
    ) -> UserPrincipal:
        if not user.role.at_least(min_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {min_role.value} role or higher",
            )
        return user

    return check_role


# Type aliases for dependency injection
OptionalUser = Annotated[UserPrincipal | None, Depends(get_current_user_optional)]
CurrentUser = Annotated[UserPrincipal, Depends(get_current_user)]
CurrentActiveUser = Annotated[UserPrincipal, Depends(get_current_active_user)]

# Role-based dependencies
RequireAdmin = Annotated[UserPrincipal, Depends(require_role(UserRole.ADMIN))]
RequireSystemAdmin = Annotated[UserPrincipal,
                               Depends(require_role(UserRole.SYSTEM_ADMIN))]
RequireSuperAdmin = Annotated[UserPrincipal,
                              Depends(require_role(UserRole.SUPER_ADMIN))]
