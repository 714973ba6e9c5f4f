"""
Attendance recording

A scanned check-in token moves a (user, event) pair to ATTENDED exactly once.
Repeated scans of the same QR code are rejected as conflicts and never create
a second row or a second confirmation email.
"""
import logging
import os
from datetime import datetime
from typing import Optional, Tuple

from fastapi import BackgroundTasks
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.admin import Admin
from models.attendance import Attendance
from models.event import Event
from models.notification_log import NotificationType
from models.registration import Registration
from models.user import User
from services.notifications import NotificationDispatcher
from services.registrations import is_registered
from utils.checkin_token import decode_checkin_token
from utils.errors import (
    EventNotFoundError, UserNotFoundError, NotRegisteredError, DuplicateAttendanceError
)
from utils.permissions import ensure_can_manage_event, is_super_admin

logger = logging.getLogger(__name__)

ATTENDANCE_REQUIRES_REGISTRATION = os.getenv("ATTENDANCE_REQUIRES_REGISTRATION", "true").lower() == "true"


def record_attendance(db: Session, qr_data: str, admin: Admin, background_tasks: BackgroundTasks,
                      dispatcher: NotificationDispatcher) -> Tuple[Attendance, User]:
    """
    Record the attendance carried by a scanned check-in token

    Checks run in order and stop at the first failure, with no state change:
    token format, event, user, admin ownership, registration, duplicate.
    The confirmation email is queued only after the row is committed.
    """
    token = decode_checkin_token(qr_data)

    event = db.query(Event).filter(Event.id == token.event_id).first()
    if not event:
        raise EventNotFoundError("Invalid event ID")

    user = db.query(User).filter(User.id == token.user_id).first()
    if not user:
        raise UserNotFoundError("Invalid user ID")

    ensure_can_manage_event(admin, event, "Unauthorized to record attendance for this event")

    if ATTENDANCE_REQUIRES_REGISTRATION and not is_registered(db, user.id, event.id):
        raise NotRegisteredError(f"{user.name} is not registered for this event.")

    existing = db.query(Attendance.id).filter(
        Attendance.user_id == user.id,
        Attendance.event_id == event.id
    ).first()
    if existing:
        raise DuplicateAttendanceError(f"Attendance already recorded for {user.name}.")

    attendance = Attendance(user_id=user.id, event_id=event.id, time=datetime.utcnow())
    db.add(attendance)
    try:
        db.commit()
    except IntegrityError:
        # Same QR code scanned concurrently, the other request won
        db.rollback()
        raise DuplicateAttendanceError(f"Attendance already recorded for {user.name}.")
    except Exception:
        db.rollback()
        raise

    db.refresh(attendance)
    logger.info("Attendance recorded for user %s at event %s by admin %s", user.id, event.id, admin.id)

    background_tasks.add_task(dispatcher.notify, NotificationType.ATTENDANCE, user.id, event.id)
    return attendance, user


def list_attendance(db: Session, admin: Admin, event_id: Optional[int] = None) -> list:
    """Attendance rows with user and event names, scoped to the events the admin manages"""
    query = db.query(Attendance, User.name, Event.purpose).join(
        User, Attendance.user_id == User.id
    ).join(
        Event, Attendance.event_id == Event.id
    )
    if not is_super_admin(admin):
        query = query.filter(Event.admin_id == admin.id)
    if event_id is not None:
        query = query.filter(Attendance.event_id == event_id)
    return query.order_by(Attendance.time.desc(), Attendance.id.desc()).all()


def attendance_summary(db: Session, admin: Admin) -> dict:
    registered = db.query(func.count(Registration.id)).join(Event, Registration.event_id == Event.id)
    attended = db.query(func.count(Attendance.id)).join(Event, Attendance.event_id == Event.id)
    if not is_super_admin(admin):
        registered = registered.filter(Event.admin_id == admin.id)
        attended = attended.filter(Event.admin_id == admin.id)

    return {
        "totalRegistered": registered.scalar() or 0,
        "totalAttended": attended.scalar() or 0,
    }
