from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_super_admin
from app.schemas.cluster import AuditLogListResponse, AuditLogResponse
from app.services import audit_service


router = APIRouter()


@router.get("/logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    event_type: Optional[str] = Query(None, description="Filter by event type"),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Most recent audit events"""
    logs = await audit_service.list_events(db, event_type=event_type, limit=limit)
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(entry) for entry in logs],
        total=len(logs),
    )
