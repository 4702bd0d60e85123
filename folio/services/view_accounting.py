"""
View Accounting Service

Decides whether a portfolio read counts as a view and applies the increment.

A read goes through four steps:
1. resolve who is reading (authenticated user, else origin address)
2. skip owners reading their own portfolio
3. skip reads inside the cooldown window of the last counted view
4. increment ``views`` atomically

Counting is best-effort. It runs after the response is assembled, is bounded
by a timeout, and never raises into the request path.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import Settings, get_settings
from folio.core.cache import get_redis
from folio.core.database import get_db_context
from folio.core.security import decode_credential
from folio.models.enums import ViewerKind, ViewOutcome
from folio.models.orm.portfolio import PortfolioPost
from folio.repositories.portfolio import PortfolioRepository

logger = logging.getLogger(__name__)

ANONYMOUS_ADDRESS = "anonymous"


def utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# =============================================================================
# Viewer Identity
# =============================================================================


@dataclass(frozen=True)
class ViewerIdentity:
    """
    Who is reading a portfolio.

    Two identities are equal only when they have the same kind and the same
    key (user id or network address).
    """

    kind: ViewerKind
    user_id: str | None = None
    network_address: str | None = None

    @classmethod
    def authenticated(cls, user_id: str) -> "ViewerIdentity":
        return cls(kind=ViewerKind.AUTHENTICATED, user_id=user_id)

    @classmethod
    def anonymous(cls, network_address: str = ANONYMOUS_ADDRESS) -> "ViewerIdentity":
        return cls(kind=ViewerKind.ANONYMOUS, network_address=network_address)

    @property
    def is_authenticated(self) -> bool:
        return self.kind == ViewerKind.AUTHENTICATED

    @property
    def key(self) -> str:
        """Stable string form, used for logging and the viewer ledger."""
        if self.is_authenticated:
            return f"user:{self.user_id}"
        return f"addr:{self.network_address}"


def _origin_address(headers: Mapping[str, str]) -> str:
    lowered = {name.lower(): value for name, value in headers.items()}

    forwarded = lowered.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop

    real_ip = lowered.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    return ANONYMOUS_ADDRESS


def resolve_viewer_identity(
    credential: str | None, headers: Mapping[str, str]
) -> ViewerIdentity:
    """
    Derive the viewer identity for a read request.

    A credential that decodes to a non-empty user id makes the viewer
    authenticated. Anything else (no credential, malformed credential, empty
    id) falls back to the origin address: first X-Forwarded-For hop, then
    X-Real-IP, then the literal "anonymous".

    Args:
        credential: Bearer credential without the scheme prefix, if any
        headers: Request headers

    Returns:
        ViewerIdentity for the requester
    """
    user_id = decode_credential(credential)
    if user_id:
        return ViewerIdentity.authenticated(user_id)

    if credential:
        logger.debug("Unusable credential on portfolio read, treating viewer as anonymous")

    return ViewerIdentity.anonymous(_origin_address(headers))


def _same_user(user_id: str, owner_id: UUID | str) -> bool:
    try:
        return UUID(user_id) == UUID(str(owner_id))
    except ValueError:
        return user_id == str(owner_id)


def is_owner_exempt(identity: ViewerIdentity, owner_id: UUID | str) -> bool:
    """Owners never count views on their own portfolios; anonymous viewers are never owners."""
    if not identity.is_authenticated or identity.user_id is None:
        return False
    return _same_user(identity.user_id, owner_id)


# =============================================================================
# Recency Gate
# =============================================================================


class RecencyGate:
    """
    Cooldown shared by all viewers of one portfolio.

    The gate is closed while ``now - last_counted_at < window``.
    """

    def __init__(self, window: timedelta):
        self.window = window

    def cutoff(self, now: datetime) -> datetime:
        """Latest previous count time that still lets a new view count."""
        return now - self.window

    def is_closed(self, last_counted_at: datetime | None, now: datetime) -> bool:
        if last_counted_at is None:
            return False
        return _as_utc(now) - _as_utc(last_counted_at) < self.window


# =============================================================================
# Recent Viewer Ledger
# =============================================================================


class RecentViewerLedger:
    """
    Per-portfolio record of viewers seen within the window, kept in Redis.

    Each (portfolio, viewer) pair gets a key that expires with the window,
    so distinct viewers each count once per window. Every Redis call is
    bounded by ``timeout`` and raises ``TimeoutError`` past it.
    """

    KEY_PREFIX = "folio:views:"

    def __init__(
        self,
        window: timedelta,
        redis_factory: Callable[[], Awaitable[redis.Redis]] = get_redis,
        timeout: float | None = None,
    ):
        self.window = window
        self.timeout = timeout
        self._redis_factory = redis_factory

    def key_for(self, portfolio_id: UUID, identity: ViewerIdentity) -> str:
        return f"{self.KEY_PREFIX}{portfolio_id}:{identity.key}"

    async def claim(self, portfolio_id: UUID, identity: ViewerIdentity) -> bool:
        """
        Record that a viewer has seen a portfolio.

        Returns:
            True if the viewer had not been seen within the window
        """
        seconds = int(self.window.total_seconds())
        if seconds <= 0:
            return True

        client = await self._redis_factory()
        created = await asyncio.wait_for(
            client.set(self.key_for(portfolio_id, identity), "1", nx=True, ex=seconds),
            timeout=self.timeout,
        )
        return bool(created)

    async def release(self, portfolio_id: UUID, identity: ViewerIdentity) -> None:
        """Forget a claim whose view was never counted."""
        if self.window.total_seconds() < 1:
            return

        client = await self._redis_factory()
        await asyncio.wait_for(
            client.delete(self.key_for(portfolio_id, identity)), timeout=self.timeout
        )


# =============================================================================
# View Counter
# =============================================================================


class ViewCounter:
    """Applies view increments as single atomic UPDATE statements."""

    def __init__(self, session: AsyncSession):
        self.repo = PortfolioRepository(session)

    async def increment_if_due(
        self, portfolio_id: UUID, now: datetime, cutoff: datetime
    ) -> bool:
        return await self.repo.increment_views_if_due(portfolio_id, now, cutoff)

    async def increment(self, portfolio_id: UUID, now: datetime) -> bool:
        return await self.repo.increment_views(portfolio_id, now)


# =============================================================================
# Orchestration
# =============================================================================


@dataclass(frozen=True)
class ViewTarget:
    """The fields of a portfolio needed to account a view, detached from the session."""

    portfolio_id: UUID
    owner_id: UUID
    published: bool
    last_view_counted_at: datetime | None = None

    @classmethod
    def from_portfolio(cls, portfolio: PortfolioPost) -> "ViewTarget":
        return cls(
            portfolio_id=portfolio.id,
            owner_id=portfolio.owner_id,
            published=portfolio.published,
            last_view_counted_at=portfolio.last_view_counted_at,
        )


class ViewAccountingService:
    """Decides whether a read counts and applies the increment."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        gate: RecencyGate,
        mode: str = "resource",
        ledger: RecentViewerLedger | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.counter = ViewCounter(session)
        self.gate = gate
        self.mode = mode
        self.ledger = ledger
        self.clock = clock

    @classmethod
    def from_settings(
        cls, session: AsyncSession, settings: Settings | None = None
    ) -> "ViewAccountingService":
        settings = settings or get_settings()
        window = timedelta(seconds=settings.view_cooldown_seconds)
        ledger = None
        if settings.view_gate_mode == "viewer":
            # Leave the rest of the count budget for the portfolio-wide fallback
            ledger = RecentViewerLedger(
                window,
                redis_factory=get_redis,
                timeout=min(
                    settings.redis_connect_timeout_seconds,
                    settings.view_count_timeout_seconds / 2,
                ),
            )
        return cls(
            session,
            gate=RecencyGate(window),
            mode=settings.view_gate_mode,
            ledger=ledger,
        )

    async def record_view(self, target: ViewTarget, identity: ViewerIdentity) -> ViewOutcome:
        """
        Account a single read of a portfolio.

        Storage errors are logged and reported as FAILED, never raised.

        Args:
            target: Portfolio being read
            identity: Resolved viewer

        Returns:
            What happened to the view
        """
        if is_owner_exempt(identity, target.owner_id):
            outcome = ViewOutcome.OWNER_EXEMPT
        elif not target.published:
            outcome = ViewOutcome.UNPUBLISHED
        else:
            now = self.clock()
            try:
                if self.mode == "viewer" and self.ledger is not None:
                    outcome = await self._count_per_viewer(self.ledger, target, identity, now)
                else:
                    outcome = await self._count_with_gate(target, now)
            except Exception as e:
                logger.warning(
                    f"Failed to count view for portfolio {target.portfolio_id}: {e}",
                    extra={
                        "portfolio_id": str(target.portfolio_id),
                        "viewer": identity.key,
                    },
                )
                outcome = ViewOutcome.FAILED

        logger.debug(
            f"View {outcome.value} for portfolio {target.portfolio_id}",
            extra={
                "portfolio_id": str(target.portfolio_id),
                "viewer": identity.key,
                "outcome": outcome.value,
            },
        )
        return outcome

    async def _count_with_gate(self, target: ViewTarget, now: datetime) -> ViewOutcome:
        if self.gate.is_closed(target.last_view_counted_at, now):
            return ViewOutcome.RATE_LIMITED

        # The snapshot may be stale; the conditional update re-checks the window
        counted = await self.counter.increment_if_due(
            target.portfolio_id, now, self.gate.cutoff(now)
        )
        return ViewOutcome.COUNTED if counted else ViewOutcome.RATE_LIMITED

    async def _count_per_viewer(
        self,
        ledger: RecentViewerLedger,
        target: ViewTarget,
        identity: ViewerIdentity,
        now: datetime,
    ) -> ViewOutcome:
        try:
            is_new_viewer = await ledger.claim(target.portfolio_id, identity)
        except Exception as e:
            logger.warning(
                f"Viewer ledger unavailable, using portfolio-wide cooldown: {e}",
                extra={"portfolio_id": str(target.portfolio_id)},
            )
            return await self._count_with_gate(target, now)

        if not is_new_viewer:
            return ViewOutcome.RATE_LIMITED

        try:
            counted = await self.counter.increment(target.portfolio_id, now)
        except Exception:
            try:
                await ledger.release(target.portfolio_id, identity)
            except Exception as e:
                logger.warning(
                    f"Could not release viewer ledger entry: {e}",
                    extra={"portfolio_id": str(target.portfolio_id), "viewer": identity.key},
                )
            raise
        return ViewOutcome.COUNTED if counted else ViewOutcome.GONE


async def count_view_in_background(
    target: ViewTarget,
    identity: ViewerIdentity,
    settings: Settings | None = None,
) -> ViewOutcome:
    """
    Fire-and-forget view counting for the portfolio read endpoint.

    Opens its own session, gives up after ``view_count_timeout_seconds`` and
    never raises.

    Args:
        target: Portfolio that was read
        identity: Resolved viewer
        settings: Optional settings override

    Returns:
        Outcome of the accounting (FAILED on timeout or storage error)
    """
    settings = settings or get_settings()

    async def _run() -> ViewOutcome:
        async with get_db_context() as db:
            service = ViewAccountingService.from_settings(db, settings)
            return await service.record_view(target, identity)

    try:
        return await asyncio.wait_for(_run(), timeout=settings.view_count_timeout_seconds)
    except TimeoutError:
        logger.warning(
            f"View count for portfolio {target.portfolio_id} timed out, dropping it",
            extra={"portfolio_id": str(target.portfolio_id)},
        )
    except Exception as e:
        logger.warning(
            f"View count for portfolio {target.portfolio_id} failed: {e}",
            extra={"portfolio_id": str(target.portfolio_id)},
        )
    return ViewOutcome.FAILED
