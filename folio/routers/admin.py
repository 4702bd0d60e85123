"""
Admin Router

Platform administration: user management for Super Admins and the portfolio
overview and moderation switches for Admins and above.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from folio.core.auth import RequireAdmin, RequireSuperAdmin
from folio.core.database import DbSession
from folio.models.contracts.portfolio import (
    PortfolioAdminSummary,
    PortfolioModeration,
    PortfolioOverview,
)
from folio.models.contracts.user import UserCreate, UserPublic, UserRoleUpdate
from folio.models.orm.portfolio import PortfolioPost
from folio.models.orm.user import User
from folio.repositories.portfolio import PortfolioRepository
from folio.repositories.user import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=str(user.id),
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar=user.avatar,
        bio=user.bio,
        role=user.role,
        is_active=user.is_active,
        created_at=user.created_at,
    )


def _portfolio_summary(portfolio: PortfolioPost, owner: str | None) -> PortfolioAdminSummary:
    return PortfolioAdminSummary(
        id=str(portfolio.id),
        title=portfolio.title,
        owner=owner,
        published=portfolio.published,
        featured=portfolio.featured,
        views=portfolio.views,
        created_at=portfolio.created_at,
    )


# =============================================================================
# User Management Endpoints
# =============================================================================


@router.get("/users", response_model=list[UserPublic])
async def list_users(
    current_user: RequireSuperAdmin,
    db: DbSession,
    limit: int = Query(100, ge=1, le=1000, description="Maximum results"),
    offset: int = Query(0, ge=0, description="Number of results to skip"),
) -> list[UserPublic]:
    """
    List all users.

    Requires: SUPER_ADMIN role.

    Returns:
        List of users, oldest first
    """
    users = await UserRepository(db).list_users(limit=limit, offset=offset)
    return [_user_to_public(user) for user in users]


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: RequireSuperAdmin,
    db: DbSession,
) -> UserPublic:
    """
    Create a user.

    Requires: SUPER_ADMIN role.

    Args:
        user_data: User details and role

    Returns:
        Created user

    Raises:
        HTTPException: If the username or email is already taken
    """
    user_repo = UserRepository(db)

    if await user_repo.get_by_username(user_data.username):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this username already exists",
        )
    if await user_repo.get_by_email(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )

    user = await user_repo.create_user(
        username=user_data.username,
        email=user_data.email,
        role=user_data.role,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        avatar=user_data.avatar,
        bio=user_data.bio,
    )

    logger.info(
        f"User created by admin: {user.username}",
        extra={
            "new_user_id": str(user.id),
            "role": user.role.value,
            "created_by": str(current_user.user_id),
        },
    )

    return _user_to_public(user)


@router.patch("/users/{user_id}/role", response_model=UserPublic)
async def change_user_role(
    user_id: UUID,
    role_data: UserRoleUpdate,
    current_user: RequireSuperAdmin,
    db: DbSession,
) -> UserPublic:
    """
    Change a user's role.

    Requires: SUPER_ADMIN role.

    Raises:
        HTTPException: If the user is unknown or is the caller
    """
    if user_id == current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change your own role",
        )

    user_repo = UserRepository(db)
    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    previous_role = user.role
    user.role = role_data.role
    user = await user_repo.update(user)

    logger.info(
        f"User role changed: {user.username}",
        extra={
            "target_user_id": str(user.id),
            "from_role": previous_role.value,
            "to_role": user.role.value,
            "changed_by": str(current_user.user_id),
        },
    )

    return _user_to_public(user)


# =============================================================================
# Portfolio Oversight Endpoints
# =============================================================================


@router.get("/portfolios", response_model=PortfolioOverview)
async def portfolio_overview(
    current_user: RequireAdmin,
    db: DbSession,
) -> PortfolioOverview:
    """
    List every portfolio on the platform with publication counts.

    Requires: ADMIN role or higher.
    """
    repo = PortfolioRepository(db)
    portfolios = await repo.list_all()
    published = await repo.count_published()

    return PortfolioOverview(
        total=len(portfolios),
        published=published,
        portfolios=[
            _portfolio_summary(p, p.owner.username if p.owner else None)
            for p in portfolios
        ],
    )


@router.patch("/portfolios/{portfolio_id}", response_model=PortfolioAdminSummary)
async def moderate_portfolio(
    portfolio_id: UUID,
    moderation: PortfolioModeration,
    current_user: RequireAdmin,
    db: DbSession,
) -> PortfolioAdminSummary:
    """
    Publish, unpublish, feature or unfeature a portfolio.

    Requires: ADMIN role or higher.

    Raises:
        HTTPException: If the portfolio does not exist
    """
    repo = PortfolioRepository(db)
    portfolio = await repo.get_by_id(portfolio_id)
    if portfolio is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Portfolio not found",
        )

    if moderation.published is not None:
        portfolio.published = moderation.published
    if moderation.featured is not None:
        portfolio.featured = moderation.featured
    portfolio = await repo.update(portfolio)

    owner = await UserRepository(db).get_by_id(portfolio.owner_id)

    logger.info(
        f"Portfolio moderated: {portfolio.title}",
        extra={
            "portfolio_id": str(portfolio.id),
            "published": portfolio.published,
            "featured": portfolio.featured,
            "user_id": str(current_user.user_id),
        },
    )

    return _portfolio_summary(portfolio, owner.username if owner else None)
