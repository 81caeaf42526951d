from app.services import (
    audit_service,
    entity_token_service,
    onboarding_service,
    portfolio_service,
    team_service,
    cluster_service,
)

__all__ = [
    "audit_service",
    "entity_token_service",
    "onboarding_service",
    "portfolio_service",
    "team_service",
    "cluster_service",
]
