"""Hackathon teams and their market ledger"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Boolean, Index, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime
import secrets
import string

from app.core.database import Base
from app.core.types import GUID, generate_uuid
from app.core.config import settings

# Money columns: virtual currency with paise-level precision
Money = Numeric(14, 2)

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_team_code() -> str:
    """Generate a 6-character join code (displayed as ABC-123)"""
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))


class Team(Base):
    """Team model - one lead, a few members, one market ledger"""
    __tablename__ = "teams"

    __table_args__ = (
        Index('ix_teams_cluster_id', 'cluster_id'),
        Index('ix_teams_code', 'code', unique=True),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    code = Column(String(6), nullable=False, default=generate_team_code)
    domain = Column(String(255), nullable=True)
    size = Column(Integer, default=lambda: settings.TEAM_MAX_SIZE, nullable=False)

    college_id = Column(GUID, ForeignKey("colleges.id", ondelete="SET NULL"), nullable=True)
    cluster_id = Column(GUID, ForeignKey("clusters.id", ondelete="SET NULL"), nullable=True)
    leader_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL", use_alter=True), nullable=True)

    # Market ledger
    balance = Column(Money, nullable=False, default=lambda: settings.STARTING_BALANCE)
    total_invested = Column(Money, nullable=False, default=0)
    total_received = Column(Money, nullable=False, default=0)
    # Flips false -> true exactly once, when the portfolio is committed
    is_finalized = Column(Boolean, default=False, nullable=False)

    description = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    cluster = relationship("Cluster", back_populates="teams")
    college = relationship("College", foreign_keys=[college_id])
    leader = relationship("User", foreign_keys=[leader_id], post_update=True)
    members = relationship("User", foreign_keys="User.team_id", back_populates="team")

    @property
    def display_code(self) -> str:
        return f"{self.code[:3]}-{self.code[3:]}"

    def __repr__(self):
        return f"<Team {self.name}>"
