"""Resource model definitions."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from raggnet.database import Base, new_object_id, utcnow


class ResourceType(str, Enum):
    BOOK = "book"
    COURSE = "course"
    OTHER = "other"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


class Resource(Base):
    """Represents a shared book, course or other learning resource."""
    __tablename__ = "resources"

    id = Column(String(24), primary_key=True, default=new_object_id)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False, index=True, default=ResourceType.OTHER.value)
    url = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    submitted_by = Column(String(24), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String, nullable=False, index=True, default=ApprovalStatus.PENDING.value)
    created_at = Column(DateTime, default=utcnow)
    approved_at = Column(DateTime, nullable=True)
