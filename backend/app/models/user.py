from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Text, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    TEAM_LEAD = "team_lead"
    GATE_STAFF = "gate_staff"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class User(Base):
    """Event participant or staff account"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    hashed_password = Column(String(255), nullable=True)

    role = Column(SQLEnum(UserRole), default=UserRole.STUDENT, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Affiliations
    college_id = Column(GUID, ForeignKey("colleges.id", ondelete="SET NULL"), nullable=True, index=True)
    team_id = Column(GUID, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)

    # Onboarding - entity_id is assigned once and never changes
    entity_id = Column(String(32), unique=True, index=True, nullable=True)
    photo_url = Column(Text, nullable=True)
    photo_uploaded_at = Column(DateTime, nullable=True)

    # Gate credential (latest issued, for display only)
    qr_token = Column(Text, nullable=True)
    qr_generated_at = Column(DateTime, nullable=True)
    # Tokens issued before this unix-millis watermark are rejected at the gate
    qr_min_issued_at = Column(BigInteger, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    college = relationship("College", foreign_keys=[college_id])
    team = relationship("Team", foreign_keys=[team_id], back_populates="members")

    @property
    def is_onboarded(self) -> bool:
        return bool(self.entity_id)

    def __repr__(self):
        return f"<User {self.email}>"
