from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from database.connection import Base
from utils.auth import hash_password, verify_password


class Role(str, enum.Enum):
    EVENT_ADMIN = "event_admin"
    SUPER_ADMIN = "super_admin"


class Admin(Base):
    """
    Admin model - the acting principal of every authorized request
    Event admins manage the events they created, super admins manage all events
    """
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    institution = Column(String, nullable=True)
    role = Column(Enum(Role), nullable=False, default=Role.EVENT_ADMIN)
    created_at = Column(DateTime, default=datetime.utcnow)

    events = relationship("Event", back_populates="admin")

    @staticmethod
    def hash_password(password: str) -> str:
        return hash_password(password)

    def verify_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def __repr__(self):
        return f"<Admin(email={self.email}, role={self.role.value})>"
