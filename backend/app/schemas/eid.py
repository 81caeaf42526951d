"""Schemas for onboarding, E-ID credentials and gate verification"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from app.schemas.auth import UserResponse


class OnboardingRequest(BaseModel):
    photo_url: str = Field(..., min_length=1, max_length=2048)


class OnboardingResponse(BaseModel):
    success: bool = True
    entity_id: str
    qr_token: str
    user: UserResponse


class QRTokenResponse(BaseModel):
    """Current gate credential of the signed-in participant"""
    qr_token: str
    entity_id: str
    generated_at: Optional[datetime] = None


class VerifyQRRequest(BaseModel):
    qr_data: str = Field(..., min_length=1, max_length=512)


class ParticipantResponse(BaseModel):
    """Public participant details for gate staff"""
    id: str
    entity_id: str
    full_name: Optional[str] = None
    email: str
    role: str
    photo_url: Optional[str] = None
    college_name: Optional[str] = None
    team_name: Optional[str] = None
    cluster_name: Optional[str] = None
    cluster_tier: Optional[str] = None
    issued_at: datetime
    verified_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VerifyQRResponse(BaseModel):
    verified: bool = True
    participant: ParticipantResponse


class RevokeResponse(BaseModel):
    success: bool = True
    user_id: str
    revoked_before: int
