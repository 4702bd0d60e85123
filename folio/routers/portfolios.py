"""
Portfolios Router

Public browsing, owner CRUD and the portfolio read endpoint.
Reading a published portfolio schedules view counting as a background task;
the response never waits on it.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, status

from folio.core.auth import BearerCredentials, CurrentActiveUser, OptionalUser, UserPrincipal
from folio.core.database import DbSession
from folio.models.contracts.common import DeleteResponse
from folio.models.contracts.portfolio import (
    OwnerSummary,
    PortfolioCreate,
    PortfolioPublic,
    PortfolioUpdate,
    decode_json_list,
    encode_json_list,
)
from folio.models.orm.portfolio import PortfolioPost
from folio.models.orm.user import User
from folio.repositories.portfolio import PortfolioRepository
from folio.repositories.user import UserRepository
from folio.services.view_accounting import (
    ViewTarget,
    count_view_in_background,
    resolve_viewer_identity,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portfolios", tags=["portfolios"])


def _to_public(portfolio: PortfolioPost, owner: User | None) -> PortfolioPublic:
    return PortfolioPublic(
        id=str(portfolio.id),
        owner_id=str(portfolio.owner_id),
        owner=OwnerSummary.model_validate(owner) if owner else None,
        title=portfolio.title,
        description=portfolio.description,
        content=portfolio.content,
        images=decode_json_list(portfolio.images),
        tags=decode_json_list(portfolio.tags),
        category=portfolio.category,
        published=portfolio.published,
        featured=portfolio.featured,
        views=portfolio.views,
        created_at=portfolio.created_at,
        updated_at=portfolio.updated_at,
    )


def _is_owner(user: UserPrincipal | None, portfolio: PortfolioPost) -> bool:
    return user is not None and user.user_id == portfolio.owner_id


async def _get_owned_portfolio(
    db: DbSession, portfolio_id: UUID, user: UserPrincipal
) -> PortfolioPost:
    portfolio = await PortfolioRepository(db).get_by_id(portfolio_id)
    if portfolio is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Portfolio not found",
        )
    if not _is_owner(user, portfolio):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own portfolios",
        )
    return portfolio


@router.get("", response_model=list[PortfolioPublic])
async def list_portfolios(
    db: DbSession,
    limit: int = Query(100, ge=1, le=500, description="Maximum results"),
    offset: int = Query(0, ge=0, description="Number of results to skip"),
) -> list[PortfolioPublic]:
    """
    List published portfolios, newest first.

    Args:
        db: Database session
        limit: Maximum number of results
        offset: Number of results to skip

    Returns:
        Published portfolios with owner profiles
    """
    portfolios = await PortfolioRepository(db).list_published(limit=limit, offset=offset)
    return [_to_public(p, p.owner) for p in portfolios]


@router.get("/featured", response_model=list[PortfolioPublic])
async def list_featured_portfolios(
    db: DbSession,
    limit: int = Query(12, ge=1, le=100, description="Maximum results"),
) -> list[PortfolioPublic]:
    """List published portfolios flagged as featured."""
    portfolios = await PortfolioRepository(db).list_featured(limit=limit)
    return [_to_public(p, p.owner) for p in portfolios]


@router.get("/mine", response_model=list[PortfolioPublic])
async def list_my_portfolios(
    current_user: CurrentActiveUser,
    db: DbSession,
) -> list[PortfolioPublic]:
    """
    List the caller's portfolios, published or not.

    Args:
        current_user: Current authenticated user
        db: Database session

    Returns:
        The caller's portfolios
    """
    portfolios = await PortfolioRepository(db).list_by_owner(current_user.user_id)
    return [_to_public(p, p.owner) for p in portfolios]


@router.post("", response_model=PortfolioPublic, status_code=status.HTTP_201_CREATED)
async def create_portfolio(
    portfolio_data: PortfolioCreate,
    current_user: CurrentActiveUser,
    db: DbSession,
) -> PortfolioPublic:
    """
    Create a portfolio owned by the caller.

    Args:
        portfolio_data: Portfolio creation data
        current_user: Current authenticated user
        db: Database session

    Returns:
        Created portfolio
    """
    owner = await UserRepository(db).get_by_id(current_user.user_id)

    portfolio = PortfolioPost(
        owner_id=current_user.user_id,
        title=portfolio_data.title,
        description=portfolio_data.description,
        content=portfolio_data.content,
        images=encode_json_list(portfolio_data.images),
        tags=encode_json_list(portfolio_data.tags),
        category=portfolio_data.category,
        published=portfolio_data.published,
        featured=portfolio_data.featured,
    )
    portfolio = await PortfolioRepository(db).create(portfolio)

    logger.info(
        f"Portfolio created: {portfolio.title}",
        extra={
            "portfolio_id": str(portfolio.id),
            "user_id": str(current_user.user_id),
        },
    )

    return _to_public(portfolio, owner)


@router.get("/{portfolio_id}", response_model=PortfolioPublic)
async def get_portfolio(
    portfolio_id: UUID,
    request: Request,
    background_tasks: BackgroundTasks,
    credentials: BearerCredentials,
    current_user: OptionalUser,
    db: DbSession,
) -> PortfolioPublic:
    """
    Read a portfolio and account the view.

    Unpublished portfolios are only visible to their owner and to admins;
    everyone else gets 404 so existence is not revealed. The response carries
    the view count as read, before this request's view is accounted.

    Args:
        portfolio_id: Portfolio UUID
        request: Incoming request (origin headers)
        background_tasks: Post-response task queue
        credentials: Raw bearer credential, if any
        current_user: Resolved user, if the credential names one
        db: Database session

    Returns:
        Portfolio details

    Raises:
        HTTPException: If the portfolio is unknown or hidden from the caller
    """
    portfolio = await PortfolioRepository(db).get_with_owner(portfolio_id)

    if portfolio is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Portfolio not found",
        )

    if not portfolio.published:
        can_preview = _is_owner(current_user, portfolio) or (
            current_user is not None and current_user.is_admin
        )
        if not can_preview:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Portfolio not found",
            )

    response = _to_public(portfolio, portfolio.owner)

    identity = resolve_viewer_identity(
        credentials.credentials if credentials else None,
        request.headers,
    )
    background_tasks.add_task(
        count_view_in_background,
        ViewTarget.from_portfolio(portfolio),
        identity,
    )

    return response


@router.get("/{portfolio_id}/edit", response_model=PortfolioPublic)
async def get_portfolio_for_edit(
    portfolio_id: UUID,
    current_user: CurrentActiveUser,
    db: DbSession,
) -> PortfolioPublic:
    """
    Load a portfolio for its owner's editor. Does not count a view.

    Raises:
        HTTPException: 404 if unknown, 403 if the caller is not the owner
    """
    portfolio = await _get_owned_portfolio(db, portfolio_id, current_user)
    owner = await UserRepository(db).get_by_id(portfolio.owner_id)
    return _to_public(portfolio, owner)


@router.put("/{portfolio_id}", response_model=PortfolioPublic)
async def update_portfolio(
    portfolio_id: UUID,
    portfolio_data: PortfolioUpdate,
    current_user: CurrentActiveUser,
    db: DbSession,
) -> PortfolioPublic:
    """
    Update a portfolio. Only fields present in the request change.

    Args:
        portfolio_id: Portfolio UUID
        portfolio_data: Fields to change
        current_user: Current authenticated user
        db: Database session

    Returns:
        Updated portfolio
    """
    portfolio = await _get_owned_portfolio(db, portfolio_id, current_user)

    changes = portfolio_data.model_dump(exclude_unset=True)
    for field in ("images", "tags"):
        if field in changes:
            changes[field] = encode_json_list(changes[field])
    for field, value in changes.items():
        if value is not None:
            setattr(portfolio, field, value)

    portfolio = await PortfolioRepository(db).update(portfolio)
    owner = await UserRepository(db).get_by_id(portfolio.owner_id)

    logger.info(
        f"Portfolio updated: {portfolio.title}",
        extra={
            "portfolio_id": str(portfolio.id),
            "user_id": str(current_user.user_id),
            "fields": sorted(changes),
        },
    )

    return _to_public(portfolio, owner)


@router.delete("/{portfolio_id}", response_model=DeleteResponse)
async def delete_portfolio(
    portfolio_id: UUID,
    current_user: CurrentActiveUser,
    db: DbSession,
) -> DeleteResponse:
    """
    Delete a portfolio. Allowed for its owner and for admins.

    Raises:
        HTTPException: 404 if unknown, 403 if the caller may not delete it
    """
    repo = PortfolioRepository(db)
    portfolio = await repo.get_by_id(portfolio_id)

    if portfolio is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Portfolio not found",
        )

    if not (_is_owner(current_user, portfolio) or current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own portfolios",
        )

    await repo.delete(portfolio)

    logger.info(
        f"Portfolio deleted: {portfolio_id}",
        extra={
            "portfolio_id": str(portfolio_id),
            "user_id": str(current_user.user_id),
        },
    )

    return DeleteResponse(message="Portfolio deleted successfully")
