"""User model definitions."""

from sqlalchemy import Column, DateTime, String

from raggnet.auth.roles import Role
from raggnet.database import Base, new_object_id, utcnow


class User(Base):
    """Represents a registered account."""
    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_object_id)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String(10), nullable=True)
    name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.USER.value)  # user/admin/super-admin
    created_at = Column(DateTime, default=utcnow)

    @property
    def role_level(self) -> Role:
        return Role(self.role)
