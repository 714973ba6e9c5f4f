from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from database.connection import Base


class Attendance(Base):
    """One check-in of a user at an event, never updated once written"""
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    time = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="attendance")
    event = relationship("Event", back_populates="attendance")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_attendance_user_event"),
    )
