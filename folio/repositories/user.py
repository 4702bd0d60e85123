"""
User Repository

Provides database operations for User model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.models.enums import UserRole
from folio.models.orm.user import User
from folio.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model operations."""

    model = User

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_by_username(self, username: str) -> User | None:
        """
        Get user by username.

        Args:
            username: Username to search for

        Returns:
            User or None if not found
        """
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User or None if not found
        """
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        username: str,
        email: str,
        role: UserRole = UserRole.USER,
        **profile: str | None,
    ) -> User:
        """
        Create a new user.

        Args:
            username: Unique username
            email: User email address
            role: User role (defaults to USER)
            **profile: Optional first_name, last_name, avatar, bio

        Returns:
            Created User
        """
        user = User(username=username, email=email, role=role, **profile)
        return await self.create(user)

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[User]:
        """List users ordered by creation time."""
        result = await self.session.execute(
            select(User).order_by(User.created_at.asc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())
