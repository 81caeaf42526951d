"""
Entity Token Service - signed gate credentials

A participant's QR code carries an opaque token:

    <entityId>:<issuedAtMillis>:<hex HMAC-SHA256 of "entityId:issuedAtMillis">

Issuing needs only the entity ID and a clock. Verifying parses the token,
checks freshness, checks the signature, then resolves the participant.
Verification never writes, so gate scanners can retry freely.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging
import re
import time

from app.core.config import settings
from app.core.exceptions import (
    NotOnboardedError,
    MalformedTokenError,
    TokenExpiredError,
    InvalidSignatureError,
    TokenRevokedError,
    ParticipantNotFoundError,
)
from app.core.signer import Signer, get_signer
from app.models.user import User
from app.models.team import Team

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = ":"

_HEX_LOWER = re.compile(r"^[0-9a-f]+$")
# Longer than any millisecond clock reading
_MAX_TIMESTAMP_DIGITS = 20


def now_millis() -> int:
    """Current unix time in milliseconds"""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ParsedToken:
    """The three fields of a token, still as text"""
    entity_id: str
    timestamp_str: str
    signature: str

    @property
    def issued_at_ms(self) -> int:
        return int(self.timestamp_str)


@dataclass
class GateVerification:
    """Participant details shown to gate staff after a successful scan"""
    id: str
    entity_id: str
    full_name: Optional[str]
    email: str
    role: str
    photo_url: Optional[str]
    college_name: Optional[str]
    team_name: Optional[str]
    cluster_name: Optional[str]
    cluster_tier: Optional[str]
    issued_at: datetime
    verified_at: datetime


# ==================== PURE TOKEN OPERATIONS ====================

def format_token(entity_id: str, issued_at_ms: int, signature_hex: str) -> str:
    return TOKEN_SEPARATOR.join([entity_id, str(issued_at_ms), signature_hex])


def parse_token(raw: str) -> ParsedToken:
    """Split a token into its fields; anything but exactly three is malformed"""
    if not isinstance(raw, str):
        raise MalformedTokenError()
    parts = raw.split(TOKEN_SEPARATOR)
    if len(parts) != 3:
        raise MalformedTokenError()
    return ParsedToken(entity_id=parts[0], timestamp_str=parts[1], signature=parts[2])


def _signed_message(entity_id: str, timestamp_str: str) -> bytes:
    return f"{entity_id}{TOKEN_SEPARATOR}{timestamp_str}".encode("utf-8")


def _max_age_ms() -> int:
    return settings.QR_TOKEN_MAX_AGE_HOURS * 60 * 60 * 1000


def issue(entity_id: Optional[str], now_ms: Optional[int] = None, signer: Optional[Signer] = None) -> str:
    """
    Create a token for an entity ID.

    Args:
        entity_id: Participant's entity ID (must be assigned)
        now_ms: Issue time in unix millis (defaults to the wall clock)
        signer: Signer override, the configured one otherwise

    Returns:
        Token string
    """
    if not entity_id:
        raise NotOnboardedError()

    signer = signer or get_signer()
    issued_at = now_millis() if now_ms is None else now_ms
    signature = signer.sign(_signed_message(entity_id, str(issued_at)))
    return format_token(entity_id, issued_at, signature.hex())


def check(raw: str, now_ms: Optional[int] = None, signer: Optional[Signer] = None) -> ParsedToken:
    """
    Validate format, freshness and signature of a token without any lookup.

    Raises:
        MalformedTokenError: not exactly three fields
        TokenExpiredError: timestamp not decimal, or older than the max age
        InvalidSignatureError: signature is not lowercase hex or does not match
    """
    parsed = parse_token(raw)

    ts = parsed.timestamp_str
    if not ts or not (ts.isascii() and ts.isdigit()):
        raise TokenExpiredError()
    if len(ts) > _MAX_TIMESTAMP_DIGITS:
        raise TokenExpiredError()

    now = now_millis() if now_ms is None else now_ms
    # Future-dated tokens are accepted; only age beyond the window expires
    if now - int(ts) > _max_age_ms():
        raise TokenExpiredError()

    if not _HEX_LOWER.match(parsed.signature) or len(parsed.signature) % 2:
        raise InvalidSignatureError()

    signer = signer or get_signer()
    if not signer.verify(_signed_message(parsed.entity_id, ts), bytes.fromhex(parsed.signature)):
        raise InvalidSignatureError()

    return parsed


# ==================== STORE-BOUND OPERATIONS ====================

async def issue_for_user(db: AsyncSession, user: User, now_ms: Optional[int] = None) -> str:
    """
    Issue a fresh token and remember it as the participant's current one.

    Older tokens stay valid until they expire or are revoked. The caller
    owns the transaction.
    """
    if not user.entity_id:
        raise NotOnboardedError()

    issued_at = now_millis() if now_ms is None else now_ms
    token = issue(user.entity_id, issued_at)

    user.qr_token = token
    user.qr_generated_at = datetime.utcfromtimestamp(issued_at / 1000)
    db.add(user)

    logger.info(f"Issued QR token for {user.entity_id}")
    return token


def get_current(user: User) -> dict:
    """Latest issued token with its entity ID and generation time"""
    if not user.entity_id or not user.qr_token:
        raise NotOnboardedError()
    return {
        "qr_token": user.qr_token,
        "entity_id": user.entity_id,
        "generated_at": user.qr_generated_at,
    }


async def verify(db: AsyncSession, raw: str, now_ms: Optional[int] = None) -> GateVerification:
    """
    Full gate check: token validity, participant lookup, revocation watermark.

    Read-only. Affiliation lookups are best effort: a participant with no
    college, team or cluster still verifies with those fields empty.
    """
    parsed = check(raw, now_ms)

    result = await db.execute(
        select(User)
        .options(
            selectinload(User.college),
            selectinload(User.team).selectinload(Team.cluster),
        )
        .where(User.entity_id == parsed.entity_id)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise ParticipantNotFoundError(parsed.entity_id)

    if user.qr_min_issued_at is not None and parsed.issued_at_ms < user.qr_min_issued_at:
        raise TokenRevokedError()

    team = user.team
    cluster = team.cluster if team else None

    return GateVerification(
        id=user.id,
        entity_id=user.entity_id,
        full_name=user.full_name,
        email=user.email,
        role=user.role.value,
        photo_url=user.photo_url,
        college_name=user.college.name if user.college else None,
        team_name=team.name if team else None,
        cluster_name=cluster.name if cluster else None,
        cluster_tier=cluster.tier if cluster else None,
        issued_at=datetime.utcfromtimestamp(parsed.issued_at_ms / 1000),
        verified_at=datetime.utcnow(),
    )


async def revoke_tokens(db: AsyncSession, user: User, now_ms: Optional[int] = None) -> int:
    """
    Invalidate every token issued to the participant before now.

    Returns:
        The new watermark in unix millis
    """
    watermark = now_millis() if now_ms is None else now_ms
    user.qr_min_issued_at = watermark
    db.add(user)
    logger.info(f"Revoked QR tokens for user {user.id} issued before {watermark}")
    return watermark
