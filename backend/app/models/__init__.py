# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.college import College, CollegeStatus
from app.models.cluster import Cluster, ClusterStage
from app.models.team import Team, generate_team_code
from app.models.investment import Investment
from app.models.audit_log import AuditLog

__all__ = [
    # User
    "User",
    "UserRole",
    # Affiliations
    "College",
    "CollegeStatus",
    "Cluster",
    "ClusterStage",
    "Team",
    "generate_team_code",
    # Market
    "Investment",
    # Admin
    "AuditLog",
]
