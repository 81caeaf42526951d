"""Pydantic schemas for teams and the investment market"""
from pydantic import BaseModel, Field, ConfigDict, AliasChoices
from typing import Optional, List
from decimal import Decimal
from datetime import datetime

from app.models.cluster import ClusterStage
from app.models.user import UserRole


# ==================== Team Schemas ====================

class TeamCreate(BaseModel):
    """Create a new team led by the caller"""
    name: str = Field(..., min_length=2, max_length=255, description="Team name")
    domain: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class TeamJoin(BaseModel):
    code: str = Field(..., min_length=1, max_length=16, description="Team code, ABC-123 or ABC123")


class TransferLeadership(BaseModel):
    new_leader_id: str


class TeamMemberResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: str
    role: UserRole
    entity_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TeamResponse(BaseModel):
    """Team details, including its join code and ledger"""
    id: str
    name: str
    code: str
    display_code: str
    domain: Optional[str] = None
    size: int
    college_id: Optional[str] = None
    cluster_id: Optional[str] = None
    leader_id: Optional[str] = None
    balance: float
    total_invested: float
    total_received: float
    is_finalized: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TeamSummary(BaseModel):
    """Another team as seen from the market"""
    id: str
    name: str
    domain: Optional[str] = None
    total_received: float
    is_finalized: bool

    model_config = ConfigDict(from_attributes=True)


class MyTeamResponse(BaseModel):
    team: Optional[TeamResponse] = None
    members: List[TeamMemberResponse] = []
    is_leader: bool = False


# ==================== Market Schemas ====================

class AllocationItem(BaseModel):
    target_team_id: str
    amount: Decimal


class PortfolioCommitRequest(BaseModel):
    """Allocations to lock in; ``investments`` is accepted as an alias"""
    allocations: List[AllocationItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("allocations", "investments"),
    )


class PortfolioCommitResponse(BaseModel):
    success: bool = True
    total_invested: float
    message: str


class InvestmentResponse(BaseModel):
    target_team_id: str
    amount: float

    model_config = ConfigDict(from_attributes=True)


class MarketClusterResponse(BaseModel):
    id: str
    name: str
    tier: Optional[str] = None
    current_stage: ClusterStage
    bidding_open: bool

    model_config = ConfigDict(from_attributes=True)


class MarketViewResponse(BaseModel):
    my_team: TeamResponse
    cluster: MarketClusterResponse
    target_teams: List[TeamSummary] = []
    investments: List[InvestmentResponse] = []
