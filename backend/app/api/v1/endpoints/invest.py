"""
Investment Market API

GET shows the caller's team, its cluster and the teams it can invest in.
POST locks the team's portfolio; only the team lead may do it, only once,
and only while the cluster's bidding window is open.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.team import (
    PortfolioCommitRequest,
    PortfolioCommitResponse,
    MarketViewResponse,
    TeamResponse,
    TeamSummary,
    MarketClusterResponse,
    InvestmentResponse,
)
from app.services import portfolio_service


router = APIRouter()


@router.get("", response_model=MarketViewResponse)
async def get_market(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Market view for the caller's team"""
    view = await portfolio_service.market_view(db, current_user)
    return MarketViewResponse(
        my_team=TeamResponse.model_validate(view.team),
        cluster=MarketClusterResponse.model_validate(view.cluster),
        target_teams=[TeamSummary.model_validate(t) for t in view.target_teams],
        investments=[InvestmentResponse.model_validate(i) for i in view.investments],
    )


@router.post("", response_model=PortfolioCommitResponse)
async def commit_portfolio(
    request: Request,
    payload: PortfolioCommitRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Lock in the team's allocations (team lead only, once)"""
    result = await portfolio_service.commit(
        db,
        current_user,
        payload.allocations,
        ip_address=request.client.host if request.client else None,
    )
    return PortfolioCommitResponse(
        success=result.success,
        total_invested=float(result.total_invested),
        message=result.message,
    )
