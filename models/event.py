from sqlalchemy import Column, String, DateTime, Date, Time, Integer, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from database.connection import Base


class Event(Base):
    """
    Event model - an event attendees register for and check in to

    Each event has a unique 6-character code used in its registration link.
    The code is issued at creation and never reassigned.
    """
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    purpose = Column(String, nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    location = Column(String, nullable=True)
    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=False, index=True)
    event_code = Column(String(6), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    admin = relationship("Admin", back_populates="events")
    registration_link = relationship(
        "EventRegistrationLink", back_populates="event", uselist=False, cascade="all, delete-orphan"
    )
    registrations = relationship("Registration", back_populates="event", cascade="all, delete-orphan")
    attendance = relationship("Attendance", back_populates="event", cascade="all, delete-orphan")
    notification_logs = relationship("NotificationLog", back_populates="event", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Event(purpose={self.purpose}, code={self.event_code})>"
