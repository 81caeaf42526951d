"""
Gate API

Scanner devices post the raw QR payload; staff see who the participant is.
Verification is read-only and safe to repeat.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import HackhubError, UserNotFoundError
from app.core.logging_config import logger
from app.core.rate_limiter import gate_scan_rate_limit
from app.models.user import User
from app.modules.auth.dependencies import get_gate_staff, get_current_admin
from app.schemas.eid import VerifyQRRequest, VerifyQRResponse, ParticipantResponse, RevokeResponse
from app.services import entity_token_service
from app.services.audit_service import AuditEvent, record_event


router = APIRouter()


@router.post("/verify-qr", response_model=VerifyQRResponse)
@gate_scan_rate_limit()
async def verify_qr(
    request: Request,
    payload: VerifyQRRequest,
    staff: User = Depends(get_gate_staff),
    db: AsyncSession = Depends(get_db)
):
    """Verify a scanned QR token and return the participant"""
    entity_id = payload.qr_data.split(":", 1)[0] or None
    try:
        verification = await entity_token_service.verify(db, payload.qr_data)
    except HackhubError as e:
        logger.log_gate_event(entity_id, success=False, reason=e.code, scanned_by=staff.id)
        raise

    logger.log_gate_event(verification.entity_id, success=True, scanned_by=staff.id)
    return VerifyQRResponse(participant=ParticipantResponse.model_validate(verification))


@router.post("/revoke/{user_id}", response_model=RevokeResponse)
async def revoke_qr_tokens(
    user_id: str,
    request: Request,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Reject every QR token issued to a participant before now"""
    user = await db.get(User, user_id)
    if not user:
        raise UserNotFoundError(user_id)

    watermark = await entity_token_service.revoke_tokens(db, user)
    record_event(
        db,
        AuditEvent.QR_REVOKED,
        actor_id=admin.id,
        target_id=user.id,
        details={"revoked_before": watermark},
        ip_address=request.client.host if request.client else None,
    )
    await db.commit()

    return RevokeResponse(user_id=user.id, revoked_before=watermark)
