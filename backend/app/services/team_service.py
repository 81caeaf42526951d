"""
Team Service - team creation, membership and leadership
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional, Tuple
import logging

from app.core.config import settings
from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    TeamNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.models.team import Team, generate_team_code
from app.models.user import User, UserRole
from app.services.audit_service import AuditEvent, record_event

logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 5


def normalize_team_code(code: str) -> str:
    """ABC-123, abc123 and ' ABC-123 ' all become ABC123"""
    return (code or "").replace("-", "").strip().upper()


async def get_team_or_404(db: AsyncSession, team_id: str) -> Team:
    team = await db.get(Team, team_id)
    if not team:
        raise TeamNotFoundError(team_id)
    return team


async def get_members(db: AsyncSession, team_id: str) -> List[User]:
    result = await db.execute(
        select(User).where(User.team_id == team_id).order_by(User.created_at)
    )
    return list(result.scalars().all())


async def count_members(db: AsyncSession, team_id: str) -> int:
    result = await db.execute(select(func.count(User.id)).where(User.team_id == team_id))
    return result.scalar() or 0


async def get_my_team(db: AsyncSession, user: User) -> Tuple[Optional[Team], List[User]]:
    """The user's team and its members, or (None, []) when not in a team"""
    if not user.team_id:
        return None, []
    team = await db.get(Team, user.team_id)
    if not team:
        return None, []
    return team, await get_members(db, team.id)


async def _unused_code(db: AsyncSession) -> str:
    for _ in range(CODE_ATTEMPTS):
        code = generate_team_code()
        result = await db.execute(select(Team.id).where(Team.code == code))
        if result.scalar_one_or_none() is None:
            return code
    raise ConflictError("Could not generate a unique team code. Please try again.")


async def create_team(
    db: AsyncSession,
    creator: User,
    name: str,
    domain: Optional[str] = None,
    description: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> Team:
    """
    Create a team led by its creator.

    The creator joins the team and is promoted to team lead.
    """
    if creator.team_id:
        raise ConflictError("You are already a member of a team")
    if not name or not name.strip():
        raise ValidationError("Team name is required", field="name")

    team = Team(
        name=name.strip(),
        code=await _unused_code(db),
        domain=domain,
        description=description,
        college_id=creator.college_id,
        leader_id=creator.id,
        balance=settings.STARTING_BALANCE,
        size=settings.TEAM_MAX_SIZE,
    )
    db.add(team)
    await db.flush()

    creator.team_id = team.id
    if creator.role == UserRole.STUDENT:
        creator.role = UserRole.TEAM_LEAD
    db.add(creator)

    record_event(
        db,
        AuditEvent.TEAM_CREATED,
        actor_id=creator.id,
        target_id=team.id,
        details={"name": team.name, "code": team.code},
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(team)

    logger.info(f"Team {team.name} ({team.code}) created by {creator.email}")
    return team


async def join_team(
    db: AsyncSession,
    user: User,
    code: str,
    ip_address: Optional[str] = None,
) -> Team:
    """Join a team by its code"""
    normalized = normalize_team_code(code)
    if not normalized:
        raise ValidationError("Team code is required", field="code")

    if user.team_id:
        raise ConflictError("You are already a member of a team")

    result = await db.execute(select(Team).where(Team.code == normalized))
    team = result.scalar_one_or_none()
    if not team:
        raise TeamNotFoundError(normalized, message="Invalid team code")

    if await count_members(db, team.id) >= team.size:
        raise ConflictError("Team is full")

    user.team_id = team.id
    db.add(user)

    record_event(
        db,
        AuditEvent.TEAM_JOINED,
        actor_id=user.id,
        target_id=team.id,
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(team)

    logger.info(f"{user.email} joined team {team.name}")
    return team


async def leave_team(db: AsyncSession, user: User) -> None:
    """Leave the current team; the lead must hand over leadership first"""
    if not user.team_id:
        raise ValidationError("You are not a member of any team")

    team = await get_team_or_404(db, user.team_id)
    if team.leader_id == user.id and await count_members(db, team.id) > 1:
        raise ConflictError("You must transfer leadership before leaving the team")

    if team.leader_id == user.id:
        team.leader_id = None
        db.add(team)
    user.team_id = None
    if user.role == UserRole.TEAM_LEAD:
        user.role = UserRole.STUDENT
    db.add(user)

    await db.commit()
    logger.info(f"{user.email} left team {team.name}")


async def transfer_leadership(
    db: AsyncSession,
    current_leader: User,
    new_leader_id: str,
    ip_address: Optional[str] = None,
) -> Team:
    """Hand team leadership to another member of the same team"""
    if not current_leader.team_id:
        raise ValidationError("You are not a member of any team")

    team = await get_team_or_404(db, current_leader.team_id)
    if team.leader_id != current_leader.id:
        raise AuthorizationError("Only the team leader can transfer leadership")
    if team.is_finalized:
        raise AuthorizationError("Leadership cannot change after the portfolio is locked")

    new_leader = await db.get(User, new_leader_id)
    if not new_leader:
        raise UserNotFoundError(new_leader_id)
    if new_leader.team_id != team.id:
        raise ValidationError("Selected user is not a member of your team", field="new_leader_id")
    if new_leader.id == current_leader.id:
        raise ValidationError("You already lead this team", field="new_leader_id")

    team.leader_id = new_leader.id
    if current_leader.role == UserRole.TEAM_LEAD:
        current_leader.role = UserRole.STUDENT
    if new_leader.role == UserRole.STUDENT:
        new_leader.role = UserRole.TEAM_LEAD
    db.add_all([team, current_leader, new_leader])

    record_event(
        db,
        AuditEvent.LEADERSHIP_TRANSFERRED,
        actor_id=current_leader.id,
        target_id=team.id,
        details={"from": current_leader.id, "to": new_leader.id},
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(team)

    logger.info(f"Team {team.name} leadership moved to {new_leader.email}")
    return team
