from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.eid import QRTokenResponse
from app.services import entity_token_service
from app.services.audit_service import AuditEvent, record_event


router = APIRouter()


@router.get("/qr", response_model=QRTokenResponse)
async def get_qr_token(
    current_user: User = Depends(get_current_user)
):
    """Current QR token of the signed-in participant"""
    return entity_token_service.get_current(current_user)


@router.post("/qr", response_model=QRTokenResponse)
async def refresh_qr_token(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Issue a new QR token; earlier tokens stay valid until they expire"""
    await entity_token_service.issue_for_user(db, current_user)
    record_event(
        db,
        AuditEvent.QR_REFRESHED,
        actor_id=current_user.id,
        target_id=current_user.id,
        ip_address=request.client.host if request.client else None,
    )
    await db.commit()
    await db.refresh(current_user)
    return entity_token_service.get_current(current_user)
