# Pydantic schemas
from app.schemas.auth import UserRegister, UserLogin, UserResponse, LoginResponse
from app.schemas.eid import (
    OnboardingRequest,
    OnboardingResponse,
    QRTokenResponse,
    VerifyQRRequest,
    VerifyQRResponse,
    ParticipantResponse,
)
from app.schemas.team import (
    TeamCreate,
    TeamJoin,
    TeamResponse,
    MyTeamResponse,
    PortfolioCommitRequest,
    PortfolioCommitResponse,
    MarketViewResponse,
)
from app.schemas.cluster import (
    ClusterCreate,
    ClusterMarketUpdate,
    ClusterResponse,
    ClusterOverviewResponse,
    AuditLogResponse,
)
