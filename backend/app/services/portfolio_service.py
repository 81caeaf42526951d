"""
Portfolio Service - the investment market commit engine

A team lead submits the team's allocations once. Commit is all-or-nothing:
the team is debited and finalized, investments are written, and every
target's ``total_received`` is recomputed, in a single transaction.

At-most-once is enforced by the database, not by the precondition checks:
the debit is a conditional UPDATE that only matches an unfinalized team with
enough balance, so of two racing commits exactly one claims the row.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

from app.core.exceptions import (
    HackhubError,
    AuthorizationError,
    TeamNotFoundError,
    AlreadyFinalizedError,
    MarketClosedError,
    InvalidAllocationError,
    InsufficientBalanceError,
    StoreUnavailableError,
)
from app.core.logging_config import logger
from app.models.user import User
from app.models.team import Team
from app.models.cluster import Cluster
from app.models.investment import Investment
from app.services.audit_service import AuditEvent, record_event

CENT = Decimal("0.01")


@dataclass
class Allocation:
    """Amount the investor places in one target team"""
    target_team_id: str
    amount: Decimal


@dataclass
class PortfolioCommitResult:
    success: bool
    total_invested: Decimal
    message: str = "Portfolio locked successfully!"


@dataclass
class MarketView:
    """What a team sees on the market page"""
    team: Team
    cluster: Cluster
    target_teams: List[Team] = field(default_factory=list)
    investments: List[Investment] = field(default_factory=list)


def _to_amount(value: Any, target_team_id: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidAllocationError("Amount must be a number", target_team_id)
    if not amount.is_finite():
        raise InvalidAllocationError("Amount must be a number", target_team_id)
    if amount < 0:
        raise InvalidAllocationError("Amount cannot be negative", target_team_id)
    if amount != amount.quantize(CENT):
        raise InvalidAllocationError("Amount has more than two decimal places", target_team_id)
    return amount


def normalize_allocations(raw: Iterable[Any]) -> List[Allocation]:
    """Accept Allocation objects, dicts or objects with the two attributes"""
    allocations = []
    for item in raw:
        if isinstance(item, dict):
            target = item.get("target_team_id")
            amount = item.get("amount")
        else:
            target = getattr(item, "target_team_id", None)
            amount = getattr(item, "amount", None)
        if not target:
            raise InvalidAllocationError("Each allocation needs a target team")
        allocations.append(Allocation(target_team_id=str(target), amount=_to_amount(amount, str(target))))
    return allocations


def lock_order(investor_id: str, target_ids: Iterable[str]) -> List[str]:
    """Every team row a commit touches, in the order its locks are taken"""
    return sorted({investor_id, *target_ids})


async def _load_team(db: AsyncSession, actor: User) -> Team:
    if not actor.team_id:
        raise TeamNotFoundError("-", message="No team assigned")

    result = await db.execute(select(Team).where(Team.id == actor.team_id))
    team = result.scalar_one_or_none()
    if not team:
        raise TeamNotFoundError(actor.team_id, message="No team assigned")
    return team


async def _load_open_cluster(db: AsyncSession, team: Team) -> Cluster:
    if not team.cluster_id:
        raise MarketClosedError()
    cluster = await db.get(Cluster, team.cluster_id)
    if not cluster or not cluster.is_market_open:
        raise MarketClosedError()
    return cluster


async def _validate_allocations(db: AsyncSession, team: Team, allocations: List[Allocation]) -> Decimal:
    """Check allocation shape and targets; returns the total amount"""
    if not allocations:
        raise InvalidAllocationError("No investments provided")

    seen = set()
    for allocation in allocations:
        if allocation.target_team_id == team.id:
            raise InvalidAllocationError("Cannot invest in your own team", allocation.target_team_id)
        if allocation.target_team_id in seen:
            raise InvalidAllocationError("Duplicate target team", allocation.target_team_id)
        seen.add(allocation.target_team_id)

    funded = [a.target_team_id for a in allocations if a.amount > 0]
    if funded:
        result = await db.execute(
            select(Team.id).where(Team.id.in_(funded), Team.cluster_id == team.cluster_id)
        )
        known = set(result.scalars().all())
        for target_id in funded:
            if target_id not in known:
                raise InvalidAllocationError("Target team is not in your cluster", target_id)

    return sum((a.amount for a in allocations), Decimal("0"))


async def _check_preconditions(db: AsyncSession, actor: User, allocations: Iterable[Any]):
    team = await _load_team(db, actor)

    if team.leader_id != actor.id:
        raise AuthorizationError("Only team leads can commit portfolio")
    if team.is_finalized:
        raise AlreadyFinalizedError()

    cluster = await _load_open_cluster(db, team)

    parsed = normalize_allocations(allocations)
    total = await _validate_allocations(db, team, parsed)

    balance = Decimal(str(team.balance))
    if total > balance:
        raise InsufficientBalanceError(required=total, available=balance)

    return team, cluster, parsed, total


async def commit(
    db: AsyncSession,
    actor: User,
    allocations: Iterable[Any],
    ip_address: Optional[str] = None,
) -> PortfolioCommitResult:
    """
    Lock in a team's portfolio.

    Args:
        db: Database session (committed or rolled back here)
        actor: Authenticated user, must lead the investing team
        allocations: Target team IDs with amounts
        ip_address: Client address for the audit trail

    Returns:
        PortfolioCommitResult with the total invested

    Raises:
        TeamNotFoundError, AuthorizationError, AlreadyFinalizedError,
        MarketClosedError, InvalidAllocationError, InsufficientBalanceError,
        StoreUnavailableError
    """
    team_id = actor.team_id

    try:
        team, cluster, parsed, total = await _check_preconditions(db, actor, allocations)
    except SQLAlchemyError as exc:
        logger.log_error_with_context(exc, context="portfolio_commit", team_id=team_id)
        raise StoreUnavailableError() from exc

    target_ids = sorted(a.target_team_id for a in parsed if a.amount > 0)

    try:
        # Lock investor and targets together in id order, before any write
        await db.execute(
            select(Team.id)
            .where(Team.id.in_(lock_order(team.id, target_ids)))
            .order_by(Team.id)
            .with_for_update()
        )

        # Claim: debit and finalize in one guarded statement
        claim = await db.execute(
            update(Team)
            .where(
                Team.id == team.id,
                Team.is_finalized.is_(False),
                Team.balance >= total,
            )
            .values(
                balance=Team.balance - total,
                total_invested=Team.total_invested + total,
                is_finalized=True,
            )
            .execution_options(synchronize_session=False)
        )
        if claim.rowcount != 1:
            raise AlreadyFinalizedError()

        if target_ids:
            await _upsert_investments(db, team.id, [a for a in parsed if a.amount > 0])
            await db.flush()
            await _recompute_total_received(db, target_ids)

        record_event(
            db,
            AuditEvent.PORTFOLIO_COMMITTED,
            actor_id=actor.id,
            target_id=team.id,
            details={
                "team_id": team.id,
                "cluster_id": cluster.id,
                "allocations": [
                    {"target_team_id": a.target_team_id, "amount": str(a.amount)} for a in parsed
                ],
                "total": str(total),
            },
            ip_address=ip_address,
        )

        await db.commit()
    except HackhubError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.log_error_with_context(exc, context="portfolio_commit", team_id=team_id)
        raise StoreUnavailableError() from exc

    await db.refresh(team)
    logger.log_market_event(
        "portfolio_committed",
        team_id,
        total=str(total),
        targets=len(target_ids),
    )
    return PortfolioCommitResult(success=True, total_invested=total)


async def _upsert_investments(db: AsyncSession, investor_id: str, allocations: List[Allocation]) -> None:
    """Write one row per target; an existing row has its amount replaced"""
    result = await db.execute(
        select(Investment).where(
            Investment.investor_team_id == investor_id,
            Investment.target_team_id.in_([a.target_team_id for a in allocations]),
        )
    )
    existing = {inv.target_team_id: inv for inv in result.scalars().all()}

    for allocation in allocations:
        investment = existing.get(allocation.target_team_id)
        if investment:
            investment.amount = allocation.amount
        else:
            db.add(Investment(
                investor_team_id=investor_id,
                target_team_id=allocation.target_team_id,
                amount=allocation.amount,
            ))


async def _recompute_total_received(db: AsyncSession, target_ids: List[str]) -> None:
    """Set total_received from the full aggregate of inbound investments"""
    inbound = (
        select(func.coalesce(func.sum(Investment.amount), 0))
        .where(Investment.target_team_id == Team.id)
        .correlate(Team)
        .scalar_subquery()
    )
    await db.execute(
        update(Team)
        .where(Team.id.in_(target_ids))
        .values(total_received=inbound)
        .execution_options(synchronize_session=False)
    )


async def market_view(db: AsyncSession, actor: User) -> MarketView:
    """Actor's team, its cluster, the other teams in it and existing investments"""
    team = await _load_team(db, actor)
    if not team.cluster_id:
        raise MarketClosedError("Team not in a cluster")

    cluster = await db.get(Cluster, team.cluster_id)
    if not cluster:
        raise MarketClosedError("Team not in a cluster")

    teams_result = await db.execute(
        select(Team)
        .where(Team.cluster_id == cluster.id, Team.id != team.id)
        .order_by(Team.name)
    )
    investments_result = await db.execute(
        select(Investment).where(Investment.investor_team_id == team.id)
    )

    return MarketView(
        team=team,
        cluster=cluster,
        target_teams=list(teams_result.scalars().all()),
        investments=list(investments_result.scalars().all()),
    )
