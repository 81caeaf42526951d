"""
Cluster Management API (super admin)

Clusters are the isolated markets teams invest within. Super admins create
them, fill them with teams and drive their stage and bidding window.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_super_admin
from app.schemas.cluster import (
    ClusterCreate,
    ClusterMarketUpdate,
    AssignTeamsRequest,
    ShuffleRequest,
    ClusterResponse,
    ClusterWithTeams,
    ClusterOverviewResponse,
    ShuffleResponse,
)
from app.schemas.team import TeamSummary
from app.services import cluster_service


router = APIRouter()


@router.get("", response_model=ClusterOverviewResponse)
async def list_clusters(
    admin: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """All clusters with their teams, plus unassigned teams and stats"""
    data = await cluster_service.overview(db)
    clusters = []
    for cluster in data.clusters:
        item = ClusterWithTeams.model_validate(cluster)
        item.teams = [TeamSummary.model_validate(t) for t in data.teams_by_cluster[cluster.id]]
        clusters.append(item)

    return ClusterOverviewResponse(
        clusters=clusters,
        unassigned_teams=[TeamSummary.model_validate(t) for t in data.unassigned_teams],
        stats=data.stats,
    )


@router.post("", response_model=ClusterResponse, status_code=status.HTTP_201_CREATED)
async def create_cluster(
    request: Request,
    payload: ClusterCreate,
    admin: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a cluster (starts in onboarding with bidding closed)"""
    return await cluster_service.create_cluster(
        db,
        admin,
        name=payload.name,
        location=payload.location,
        max_teams=payload.max_teams,
        tier=payload.tier,
        ip_address=request.client.host if request.client else None,
    )


@router.patch("/{cluster_id}/market", response_model=ClusterResponse)
async def update_market(
    cluster_id: str,
    request: Request,
    payload: ClusterMarketUpdate,
    admin: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change a cluster's stage and open or close bidding"""
    return await cluster_service.update_market(
        db,
        admin,
        cluster_id,
        current_stage=payload.current_stage,
        bidding_open=payload.bidding_open,
        ip_address=request.client.host if request.client else None,
    )


@router.post("/{cluster_id}/teams", response_model=ClusterResponse)
async def assign_teams(
    cluster_id: str,
    request: Request,
    payload: AssignTeamsRequest,
    admin: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Move teams into a cluster"""
    return await cluster_service.assign_teams(
        db,
        admin,
        cluster_id,
        payload.team_ids,
        ip_address=request.client.host if request.client else None,
    )


@router.post("/shuffle", response_model=ShuffleResponse)
async def shuffle_teams(
    request: Request,
    payload: ShuffleRequest,
    admin: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Randomly distribute teams across clusters"""
    outcome = await cluster_service.shuffle_teams(
        db,
        admin,
        clear_previous=payload.clear_previous,
        ip_address=request.client.host if request.client else None,
    )
    return ShuffleResponse(
        message=f"Successfully assigned {len(outcome.assignments)} teams to {len(outcome.cluster_stats)} clusters",
        stats={
            "total_teams": outcome.total_teams,
            "assigned_teams": len(outcome.assignments),
            "unassigned_teams": outcome.unassigned,
        },
        cluster_stats=outcome.cluster_stats,
        assignments=outcome.assignments,
    )
