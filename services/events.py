import logging
import os
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.admin import Admin
from models.event import Event
from models.event_registration_link import EventRegistrationLink
from schemas.event import EventCreate, EventUpdate
from services.event_codes import generate_unique_event_code
from utils.errors import EventNotFoundError, EventCodeAllocationError
from utils.permissions import ensure_can_manage_event, is_super_admin
from utils.qr import build_registration_link, encode_qr

logger = logging.getLogger(__name__)

EVENT_CODE_MAX_ATTEMPTS = int(os.getenv("EVENT_CODE_MAX_ATTEMPTS", 10))


def create_event(db: Session, admin: Admin, data: EventCreate) -> Event:
    """
    Create an event together with its registration link and QR code

    Each attempt picks a fresh code, renders the QR outside the transaction
    and inserts event and link in one commit. A code taken by a concurrent
    creation fails the unique constraint and the attempt is retried.
    """
    for attempt in range(1, EVENT_CODE_MAX_ATTEMPTS + 1):
        code = generate_unique_event_code(db)
        registration_link = build_registration_link(code)
        qr_code = encode_qr(registration_link)

        event = Event(
            purpose=data.purpose,
            start_date=data.start_date,
            end_date=data.end_date,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
            admin_id=admin.id,
            event_code=code,
        )
        event.registration_link = EventRegistrationLink(
            registration_link=registration_link,
            qr_code=qr_code,
        )

        db.add(event)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Event code %s collided on insert (attempt %d/%d)", code, attempt, EVENT_CODE_MAX_ATTEMPTS)
            continue
        except Exception:
            db.rollback()
            raise

        db.refresh(event)
        logger.info("Event %s created by admin %s, registration link: %s", event.id, admin.id, registration_link)
        return event

    raise EventCodeAllocationError()


def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise EventNotFoundError()
    return event


def get_event_by_code(db: Session, code: str) -> Event:
    event = db.query(Event).filter(Event.event_code == code.strip().upper()).first()
    if not event:
        raise EventNotFoundError("Event not found for this code.")
    return event


def get_event_for_admin(db: Session, event_id: int, admin: Admin,
                        detail: str = "You are not authorized to view this event.") -> Event:
    event = get_event_or_404(db, event_id)
    ensure_can_manage_event(admin, event, detail)
    return event


def list_events_for_admin(db: Session, admin: Admin) -> List[Event]:
    """Every event for super admins, only owned events for event admins"""
    query = db.query(Event)
    if not is_super_admin(admin):
        query = query.filter(Event.admin_id == admin.id)
    return query.order_by(Event.start_date.desc(), Event.id.desc()).all()


def update_event(db: Session, event_id: int, admin: Admin, data: EventUpdate) -> Event:
    event = get_event_for_admin(db, event_id, admin, "You are not authorized to edit this event.")

    event.purpose = data.purpose
    event.start_date = data.start_date
    event.end_date = data.end_date
    event.start_time = data.start_time
    event.end_time = data.end_time
    event.location = data.location

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int, admin: Admin) -> None:
    """Delete an event with its link, registrations, attendance and notification logs"""
    event = get_event_for_admin(db, event_id, admin, "You are not authorized to delete this event.")

    try:
        db.delete(event)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Event %s deleted by admin %s", event_id, admin.id)


def regenerate_registration_qr(db: Session, event_id: int, admin: Admin) -> EventRegistrationLink:
    """Rebuild the registration link and QR code of an event, keeping its code"""
    event = get_event_for_admin(db, event_id, admin, "You are not authorized to modify this event.")

    registration_link = build_registration_link(event.event_code)
    qr_code = encode_qr(registration_link)

    link = event.registration_link
    if link is None:
        link = EventRegistrationLink(event=event)
        db.add(link)
    link.registration_link = registration_link
    link.qr_code = qr_code

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(link)
    return link
