from sqlalchemy import Column, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid
from app.models.team import Money


class Investment(Base):
    """Amount one team has placed in another team of the same cluster"""
    __tablename__ = "investments"

    __table_args__ = (
        UniqueConstraint('investor_team_id', 'target_team_id', name='uq_investments_investor_target'),
        CheckConstraint('investor_team_id <> target_team_id', name='ck_investments_no_self_investment'),
        CheckConstraint('amount >= 0', name='ck_investments_amount_non_negative'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    investor_team_id = Column(GUID, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    target_team_id = Column(GUID, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Money, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    investor = relationship("Team", foreign_keys=[investor_team_id])
    target = relationship("Team", foreign_keys=[target_team_id])

    def __repr__(self):
        return f"<Investment {self.investor_team_id} -> {self.target_team_id}: {self.amount}>"
