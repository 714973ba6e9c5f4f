from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from database.connection import Base


class NotificationType(str, enum.Enum):
    REGISTRATION = "registration"
    ATTENDANCE = "attendance"
    REMINDER = "reminder"


class NotificationStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"


class NotificationLog(Base):
    """
    Append-only record of a notification send attempt
    A resend appends a new row pointing at the attempt it repeats
    """
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(NotificationType), nullable=False)
    status = Column(Enum(NotificationStatus), nullable=False)
    error = Column(String(255), nullable=True)
    resent_from_id = Column(Integer, ForeignKey("notification_logs.id", ondelete="SET NULL"), nullable=True)
    sent_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")
    event = relationship("Event", back_populates="notification_logs")
