from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from database.connection import Base


class EventRegistrationLink(Base):
    """Registration URL of an event and its QR code, overwritten when regenerated"""
    __tablename__ = "event_registration_links"

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), unique=True, nullable=False)
    registration_link = Column(String, nullable=False)
    qr_code = Column(Text, nullable=False)  # data:image/png;base64 URI
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    event = relationship("Event", back_populates="registration_link")
