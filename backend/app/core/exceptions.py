"""
Custom Exceptions for the Hackhub event platform
================================================

Every failure a caller can see is one of these. Each carries a stable
``code`` and the HTTP status the API layer renders it with, so services
raise them directly and routers never translate errors by hand.

Usage:
    from app.core.exceptions import MarketClosedError, NotOnboardedError

    if not cluster.bidding_open:
        raise MarketClosedError()
"""

from typing import Optional, Any, Dict


class HackhubError(Exception):
    """Base exception for all Hackhub errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(HackhubError):
    """Caller could not be authenticated"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class AuthorizationError(HackhubError):
    """Caller is authenticated but not allowed to do this"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(HackhubError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class ParticipantNotFoundError(ResourceNotFoundError):
    """No participant holds the scanned entity ID"""

    def __init__(self, entity_id: str):
        super().__init__("Participant", entity_id, message="Participant not found")


class TeamNotFoundError(ResourceNotFoundError):
    def __init__(self, team_id: str, message: Optional[str] = None):
        super().__init__("Team", team_id, message=message)


class ClusterNotFoundError(ResourceNotFoundError):
    def __init__(self, cluster_id: str):
        super().__init__("Cluster", cluster_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(HackhubError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(HackhubError):
    """Request conflicts with current state (duplicate, full, already member)"""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


# ============================================
# Entity / QR Token Errors
# ============================================

class NotOnboardedError(HackhubError):
    """Participant has no entity ID (or no token) yet"""

    status_code = 400

    def __init__(self, message: str = "Entity ID not found. Please complete onboarding first."):
        super().__init__(message, code="NOT_ONBOARDED")


class MalformedTokenError(HackhubError):
    status_code = 400

    def __init__(self, message: str = "Invalid QR token format"):
        super().__init__(message, code="MALFORMED_TOKEN")


class TokenExpiredError(HackhubError):
    status_code = 400

    def __init__(self, message: str = "QR code expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class InvalidSignatureError(HackhubError):
    status_code = 400

    def __init__(self, message: str = "Invalid QR signature"):
        super().__init__(message, code="INVALID_SIGNATURE")


class TokenRevokedError(HackhubError):
    """Token was issued before the participant's revocation watermark"""

    status_code = 400

    def __init__(self, message: str = "QR code has been revoked"):
        super().__init__(message, code="TOKEN_REVOKED")


class EntityIdExhaustedError(HackhubError):
    """Could not find a free entity ID within the retry budget"""

    status_code = 500

    def __init__(self, attempts: int):
        super().__init__(
            "Failed to generate unique Entity ID. Please try again.",
            code="ENTITY_ID_EXHAUSTED",
            details={"attempts": attempts}
        )


# ============================================
# Investment Market Errors
# ============================================

class MarketError(HackhubError):
    """Base class for portfolio commit failures"""

    status_code = 400


class AlreadyFinalizedError(MarketError):
    status_code = 409

    def __init__(self, message: str = "Portfolio already locked"):
        super().__init__(message, code="ALREADY_FINALIZED")


class MarketClosedError(MarketError):
    def __init__(self, message: str = "Market is not open for trading"):
        super().__init__(message, code="MARKET_CLOSED")


class InvalidAllocationError(MarketError):
    def __init__(self, message: str, target_team_id: Optional[str] = None):
        super().__init__(message, code="INVALID_ALLOCATION")
        if target_team_id:
            self.details["target_team_id"] = target_team_id


class InsufficientBalanceError(MarketError):
    def __init__(self, required, available):
        super().__init__(
            "Total exceeds available balance",
            code="INSUFFICIENT_BALANCE",
            details={"required": str(required), "available": str(available)}
        )


# ============================================
# Infrastructure Errors
# ============================================

class StoreUnavailableError(HackhubError):
    """Transient database failure - the only retryable kind"""

    status_code = 503

    def __init__(self, message: str = "Data store temporarily unavailable"):
        super().__init__(message, code="STORE_UNAVAILABLE")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: HackhubError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
