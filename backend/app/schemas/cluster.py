"""Pydantic schemas for super admin cluster management and audit logs"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.models.cluster import ClusterStage
from app.schemas.team import TeamSummary


class ClusterCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = None
    max_teams: Optional[int] = Field(None, ge=1, le=1000)
    tier: Optional[str] = Field(None, max_length=50)


class ClusterMarketUpdate(BaseModel):
    current_stage: Optional[ClusterStage] = None
    bidding_open: Optional[bool] = None


class AssignTeamsRequest(BaseModel):
    team_ids: List[str] = Field(..., min_length=1)


class ShuffleRequest(BaseModel):
    clear_previous: bool = True


class ClusterResponse(BaseModel):
    id: str
    name: str
    location: Optional[str] = None
    tier: Optional[str] = None
    max_teams: int
    current_stage: ClusterStage
    bidding_open: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClusterWithTeams(ClusterResponse):
    teams: List[TeamSummary] = []


class ClusterOverviewResponse(BaseModel):
    clusters: List[ClusterWithTeams]
    unassigned_teams: List[TeamSummary]
    stats: Dict[str, int]


class ShuffleResponse(BaseModel):
    success: bool = True
    message: str
    stats: Dict[str, int]
    cluster_stats: List[Dict[str, Any]]
    assignments: List[Dict[str, str]]


# ==================== Audit ====================

class AuditLogResponse(BaseModel):
    id: str
    event_type: str
    actor_id: Optional[str] = None
    target_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogResponse]
    total: int
