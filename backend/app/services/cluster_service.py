"""
Cluster Service - super admin management of clusters and their markets

Handles:
- Cluster creation and listing with team stats
- Opening and closing the bidding market
- Assigning teams to clusters, by hand or by shuffle
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import random

from app.core.config import settings
from app.core.exceptions import (
    ClusterNotFoundError,
    ConflictError,
    TeamNotFoundError,
    ValidationError,
)
from app.models.cluster import Cluster, ClusterStage
from app.models.team import Team
from app.models.user import User
from app.services.audit_service import AuditEvent, record_event

logger = logging.getLogger(__name__)


@dataclass
class ClusterOverview:
    clusters: List[Cluster]
    teams_by_cluster: Dict[str, List[Team]]
    unassigned_teams: List[Team]
    stats: Dict[str, int]


@dataclass
class ShuffleResult:
    assignments: List[Dict[str, str]] = field(default_factory=list)
    total_teams: int = 0
    cluster_stats: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def unassigned(self) -> int:
        return self.total_teams - len(self.assignments)


async def get_cluster_or_404(db: AsyncSession, cluster_id: str) -> Cluster:
    cluster = await db.get(Cluster, cluster_id)
    if not cluster:
        raise ClusterNotFoundError(cluster_id)
    return cluster


async def overview(db: AsyncSession) -> ClusterOverview:
    """All clusters with their teams, the unassigned teams and counts"""
    clusters = list((await db.execute(select(Cluster).order_by(Cluster.name))).scalars().all())
    teams = list((await db.execute(select(Team).order_by(Team.name))).scalars().all())

    teams_by_cluster: Dict[str, List[Team]] = {c.id: [] for c in clusters}
    unassigned = []
    for team in teams:
        if team.cluster_id and team.cluster_id in teams_by_cluster:
            teams_by_cluster[team.cluster_id].append(team)
        else:
            unassigned.append(team)

    return ClusterOverview(
        clusters=clusters,
        teams_by_cluster=teams_by_cluster,
        unassigned_teams=unassigned,
        stats={
            "total_clusters": len(clusters),
            "total_teams": len(teams),
            "assigned_teams": len(teams) - len(unassigned),
            "unassigned_teams": len(unassigned),
        },
    )


async def create_cluster(
    db: AsyncSession,
    actor: User,
    name: str,
    location: Optional[str] = None,
    max_teams: Optional[int] = None,
    tier: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> Cluster:
    """Create a cluster in the onboarding stage with bidding closed"""
    if not name or not name.strip():
        raise ValidationError("Cluster name is required", field="name")

    existing = await db.execute(select(Cluster.id).where(Cluster.name == name.strip()))
    if existing.scalar_one_or_none():
        raise ConflictError(f"Cluster '{name.strip()}' already exists")

    cluster = Cluster(
        name=name.strip(),
        location=location,
        tier=tier,
        max_teams=max_teams or settings.CLUSTER_DEFAULT_MAX_TEAMS,
        current_stage=ClusterStage.ONBOARDING,
        bidding_open=False,
    )
    db.add(cluster)
    await db.flush()

    record_event(
        db,
        AuditEvent.CLUSTER_CREATED,
        actor_id=actor.id,
        target_id=cluster.id,
        details={"cluster_name": cluster.name},
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(cluster)

    logger.info(f"Cluster {cluster.name} created by {actor.email}")
    return cluster


async def update_market(
    db: AsyncSession,
    actor: User,
    cluster_id: str,
    current_stage: Optional[ClusterStage] = None,
    bidding_open: Optional[bool] = None,
    ip_address: Optional[str] = None,
) -> Cluster:
    """
    Move a cluster between stages and open or close bidding.

    Bidding can only be open while the cluster is in the bidding stage;
    leaving that stage closes it.
    """
    cluster = await get_cluster_or_404(db, cluster_id)

    stage = ClusterStage(current_stage) if current_stage is not None else cluster.current_stage
    if bidding_open and stage != ClusterStage.BIDDING:
        raise ValidationError("Bidding can only open in the bidding stage", field="bidding_open")

    cluster.current_stage = stage
    if bidding_open is not None:
        cluster.bidding_open = bidding_open
    if stage != ClusterStage.BIDDING:
        cluster.bidding_open = False

    db.add(cluster)
    record_event(
        db,
        AuditEvent.CLUSTER_MARKET_UPDATED,
        actor_id=actor.id,
        target_id=cluster.id,
        details={
            "current_stage": cluster.current_stage.value,
            "bidding_open": cluster.bidding_open,
        },
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(cluster)

    logger.info(
        f"Cluster {cluster.name} market set to {cluster.current_stage.value} "
        f"(bidding {'open' if cluster.bidding_open else 'closed'})"
    )
    return cluster


async def _team_count(db: AsyncSession, cluster_id: str) -> int:
    result = await db.execute(select(func.count(Team.id)).where(Team.cluster_id == cluster_id))
    return result.scalar() or 0


async def assign_teams(
    db: AsyncSession,
    actor: User,
    cluster_id: str,
    team_ids: List[str],
    ip_address: Optional[str] = None,
) -> Cluster:
    """Move teams into a cluster without exceeding its capacity"""
    cluster = await get_cluster_or_404(db, cluster_id)
    if not team_ids:
        raise ValidationError("At least one team is required", field="team_ids")

    result = await db.execute(select(Team).where(Team.id.in_(team_ids)))
    teams = {team.id: team for team in result.scalars().all()}
    for team_id in team_ids:
        if team_id not in teams:
            raise TeamNotFoundError(team_id)

    moving = [t for t in teams.values() if t.cluster_id != cluster.id]
    for team in moving:
        if team.is_finalized:
            raise ConflictError(f"Team '{team.name}' has a locked portfolio and cannot change cluster")

    if await _team_count(db, cluster.id) + len(moving) > cluster.max_teams:
        raise ConflictError(f"Cluster '{cluster.name}' cannot hold more than {cluster.max_teams} teams")

    for team in moving:
        team.cluster_id = cluster.id
        db.add(team)

    record_event(
        db,
        AuditEvent.TEAMS_ASSIGNED,
        actor_id=actor.id,
        target_id=cluster.id,
        details={"team_ids": [t.id for t in moving]},
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(cluster)

    logger.info(f"Assigned {len(moving)} teams to cluster {cluster.name}")
    return cluster


async def shuffle_teams(
    db: AsyncSession,
    actor: User,
    clear_previous: bool = True,
    rng: Optional[random.Random] = None,
    ip_address: Optional[str] = None,
) -> ShuffleResult:
    """
    Distribute teams across clusters at random, round robin, up to each
    cluster's capacity. Teams with a locked portfolio never move.
    """
    rng = rng or random.Random()

    clusters = list((await db.execute(select(Cluster).order_by(Cluster.name))).scalars().all())
    if not clusters:
        raise ValidationError("No clusters found. Please create clusters first.")

    teams = list((await db.execute(select(Team).order_by(Team.name))).scalars().all())
    if not teams:
        raise ValidationError("No teams found to shuffle")

    known = {c.id for c in clusters}
    counts: Dict[str, int] = {c.id: 0 for c in clusters}
    candidates = []
    for team in teams:
        keeps_place = team.is_finalized or (not clear_previous and team.cluster_id in known)
        if keeps_place and team.cluster_id in known:
            counts[team.cluster_id] += 1
        elif not team.is_finalized:
            team.cluster_id = None
            candidates.append(team)

    rng.shuffle(candidates)

    outcome = ShuffleResult(total_teams=len(candidates))
    index = 0
    for team in candidates:
        for _ in range(len(clusters)):
            cluster = clusters[index]
            index = (index + 1) % len(clusters)
            if counts[cluster.id] < cluster.max_teams:
                team.cluster_id = cluster.id
                counts[cluster.id] += 1
                outcome.assignments.append({
                    "team_id": team.id,
                    "team_name": team.name,
                    "cluster_id": cluster.id,
                    "cluster_name": cluster.name,
                })
                break
        else:
            logger.warning(f"Could not assign team {team.name} - all clusters full")
        db.add(team)

    outcome.cluster_stats = [
        {"id": c.id, "name": c.name, "team_count": counts[c.id], "max_teams": c.max_teams}
        for c in clusters
    ]

    record_event(
        db,
        AuditEvent.TEAMS_SHUFFLED,
        actor_id=actor.id,
        details={
            "total_teams": outcome.total_teams,
            "assigned_teams": len(outcome.assignments),
            "clusters_used": len(clusters),
            "clear_previous": clear_previous,
        },
        ip_address=ip_address,
    )

    await db.commit()
    logger.info(f"Shuffled {len(outcome.assignments)} of {outcome.total_teams} teams into {len(clusters)} clusters")
    return outcome
