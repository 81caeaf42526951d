"""Clusters - isolated investment markets of teams"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Boolean, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class ClusterStage(str, enum.Enum):
    """Lifecycle stage of a cluster"""
    ONBOARDING = "onboarding"
    PITCHING = "pitching"
    BIDDING = "bidding"
    CLOSED = "closed"


class Cluster(Base):
    """A group of teams that trade investments against each other"""
    __tablename__ = "clusters"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    name = Column(String(255), nullable=False, unique=True)
    location = Column(Text, nullable=True)
    tier = Column(String(50), nullable=True)
    max_teams = Column(Integer, default=10, nullable=False)

    current_stage = Column(SQLEnum(ClusterStage), default=ClusterStage.ONBOARDING, nullable=False)
    bidding_open = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    teams = relationship("Team", back_populates="cluster")

    @property
    def is_market_open(self) -> bool:
        return self.current_stage == ClusterStage.BIDDING and bool(self.bidding_open)

    def __repr__(self):
        return f"<Cluster {self.name} ({self.current_stage.value if self.current_stage else '-'})>"
