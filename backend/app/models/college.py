from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class CollegeStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class College(Base):
    """College a participant is affiliated with"""
    __tablename__ = "colleges"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    name = Column(String(255), nullable=False)
    location = Column(Text, nullable=True)
    status = Column(SQLEnum(CollegeStatus), default=CollegeStatus.ACTIVE, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<College {self.name}>"
