"""Session token model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from raggnet.database import Base, utcnow


class SessionToken(Base):
    """Server-side record of an issued bearer token."""
    __tablename__ = "session_tokens"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    issued_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)
