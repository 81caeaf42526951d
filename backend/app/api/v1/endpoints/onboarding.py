"""
Onboarding API

Completing onboarding assigns the participant's entity ID (once) and issues
the gate credential shown on their E-ID.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import UserResponse
from app.schemas.eid import OnboardingRequest, OnboardingResponse
from app.services import onboarding_service


router = APIRouter()


@router.post("/complete", response_model=OnboardingResponse)
async def complete_onboarding(
    request: Request,
    payload: OnboardingRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Assign an entity ID if needed, store the photo and issue a fresh QR token"""
    user, token = await onboarding_service.complete_onboarding(
        db,
        current_user,
        payload.photo_url,
        ip_address=request.client.host if request.client else None,
    )
    return OnboardingResponse(
        entity_id=user.entity_id,
        qr_token=token,
        user=UserResponse.model_validate(user),
    )
