from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AuditLog(Base):
    """Append-only audit trail of participant and admin actions"""
    __tablename__ = "audit_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    actor_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Action details
    event_type = Column(String(100), nullable=False, index=True)  # e.g., 'PORTFOLIO_COMMITTED', 'cluster_created'
    target_id = Column(GUID, nullable=True)  # ID of the affected entity

    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    # Request metadata
    ip_address = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    actor = relationship("User", foreign_keys=[actor_id])

    def __repr__(self):
        return f"<AuditLog {self.event_type} by {self.actor_id}>"
