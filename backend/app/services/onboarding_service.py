"""
Onboarding Service - assigns entity IDs and the first gate credential
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime
from typing import Optional, Tuple
import logging
import secrets

from app.core.config import settings
from app.core.exceptions import EntityIdExhaustedError, ValidationError
from app.models.user import User
from app.services import entity_token_service
from app.services.audit_service import AuditEvent, record_event

logger = logging.getLogger(__name__)


def generate_entity_id(year: Optional[int] = None) -> str:
    """Random entity ID such as OF-2026-A7F3"""
    year = year or datetime.utcnow().year
    return f"{settings.ENTITY_ID_PREFIX}-{year}-{secrets.token_hex(2).upper()}"


async def allocate_entity_id(db: AsyncSession) -> str:
    """Pick an entity ID no other participant holds"""
    for _ in range(settings.ENTITY_ID_MAX_ATTEMPTS):
        candidate = generate_entity_id()
        result = await db.execute(select(User.id).where(User.entity_id == candidate))
        if result.scalar_one_or_none() is None:
            return candidate
        logger.warning(f"Entity ID collision on {candidate}, retrying")

    raise EntityIdExhaustedError(settings.ENTITY_ID_MAX_ATTEMPTS)


async def complete_onboarding(
    db: AsyncSession,
    user: User,
    photo_url: str,
    ip_address: Optional[str] = None,
) -> Tuple[User, str]:
    """
    Finish onboarding for a participant.

    The entity ID is assigned only once; repeating onboarding keeps it,
    updates the photo and issues a fresh token.

    Returns:
        (user, token)
    """
    if not photo_url or not photo_url.strip():
        raise ValidationError("Photo URL is required", field="photo_url")

    first_time = not user.entity_id
    if first_time:
        user.entity_id = await allocate_entity_id(db)

    user.photo_url = photo_url.strip()
    user.photo_uploaded_at = datetime.utcnow()

    token = await entity_token_service.issue_for_user(db, user)

    record_event(
        db,
        AuditEvent.ONBOARDING_COMPLETED,
        actor_id=user.id,
        target_id=user.id,
        details={"entity_id": user.entity_id, "first_time": first_time},
        ip_address=ip_address,
    )

    await db.commit()
    await db.refresh(user)

    logger.info(f"Onboarding completed for {user.email} as {user.entity_id}")
    return user, token
