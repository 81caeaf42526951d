"""
Audit Service - append-only event trail

Writes happen inside the caller's transaction so an audit row is committed
together with the change it describes (or not at all).
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Any, Dict, List, Optional

from app.models.audit_log import AuditLog


class AuditEvent:
    """Well-known audit event types"""
    PORTFOLIO_COMMITTED = "PORTFOLIO_COMMITTED"
    ONBOARDING_COMPLETED = "onboarding_completed"
    QR_REFRESHED = "qr_refreshed"
    QR_REVOKED = "qr_revoked"
    TEAM_CREATED = "team_created"
    TEAM_JOINED = "team_joined"
    LEADERSHIP_TRANSFERRED = "leadership_transferred"
    CLUSTER_CREATED = "cluster_created"
    CLUSTER_MARKET_UPDATED = "cluster_market_updated"
    TEAMS_ASSIGNED = "teams_assigned"
    TEAMS_SHUFFLED = "team_shuffle_completed"


def record_event(
    db: AsyncSession,
    event_type: str,
    actor_id: Optional[str] = None,
    target_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """Stage an audit row in the current session (flushed with the caller's commit)"""
    entry = AuditLog(
        event_type=event_type,
        actor_id=actor_id,
        target_id=target_id,
        details=details or {},
        ip_address=ip_address,
    )
    db.add(entry)
    return entry


async def list_events(
    db: AsyncSession,
    event_type: Optional[str] = None,
    limit: int = 100,
) -> List[AuditLog]:
    """Most recent audit rows first, optionally filtered by event type"""
    query = select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit)
    if event_type:
        query = query.where(AuditLog.event_type == event_type)
    result = await db.execute(query)
    return list(result.scalars().all())
