"""
Teams API

Endpoints for creating and joining teams and handing over leadership.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.team import (
    TeamCreate,
    TeamJoin,
    TransferLeadership,
    TeamResponse,
    TeamMemberResponse,
    MyTeamResponse,
)
from app.services import team_service


router = APIRouter()


async def _my_team_response(db: AsyncSession, user: User) -> MyTeamResponse:
    team, members = await team_service.get_my_team(db, user)
    if not team:
        return MyTeamResponse()
    return MyTeamResponse(
        team=TeamResponse.model_validate(team),
        members=[TeamMemberResponse.model_validate(m) for m in members],
        is_leader=team.leader_id == user.id,
    )


@router.get("", response_model=MyTeamResponse)
async def get_my_team(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's team with its members"""
    return await _my_team_response(db, current_user)


@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    request: Request,
    payload: TeamCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a team; the creator becomes its lead"""
    return await team_service.create_team(
        db,
        current_user,
        name=payload.name,
        domain=payload.domain,
        description=payload.description,
        ip_address=request.client.host if request.client else None,
    )


@router.post("/join", response_model=MyTeamResponse)
async def join_team(
    request: Request,
    payload: TeamJoin,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Join a team with its code (ABC-123 or ABC123)"""
    await team_service.join_team(
        db,
        current_user,
        payload.code,
        ip_address=request.client.host if request.client else None,
    )
    return await _my_team_response(db, current_user)


@router.post("/leave")
async def leave_team(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Leave the current team"""
    await team_service.leave_team(db, current_user)
    return {"success": True, "message": "Left team"}


@router.post("/transfer-leadership", response_model=MyTeamResponse)
async def transfer_leadership(
    request: Request,
    payload: TransferLeadership,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Make another member the team lead"""
    await team_service.transfer_leadership(
        db,
        current_user,
        payload.new_leader_id,
        ip_address=request.client.host if request.client else None,
    )
    return await _my_team_response(db, current_user)
