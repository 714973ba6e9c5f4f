from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session

from database.connection import get_db
from models.admin import Admin
from models.event import Event
from models.registration import Registration
from models.user import User
from routes.admin import get_current_admin
from schemas.event import EventCreate, EventUpdate
from services import events as event_service
from services.notifications import NotificationDispatcher, get_dispatcher

router = APIRouter()


def serialize_event(event: Event) -> dict:
    return {
        "id": event.id,
        "purpose": event.purpose,
        "event_code": event.event_code,
        "start_date": event.start_date.isoformat() if event.start_date else None,
        "end_date": event.end_date.isoformat() if event.end_date else None,
        "start_time": event.start_time.isoformat() if event.start_time else None,
        "end_time": event.end_time.isoformat() if event.end_time else None,
        "location": event.location,
        "admin_id": event.admin_id
    }


@router.post("/events", status_code=201)
def create_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """
    Create an event owned by the authenticated admin
    A unique event code, its registration link and the link's QR code are generated with it
    """
    event = event_service.create_event(db, admin, data)
    link = event.registration_link

    return {
        "message": "Event created successfully",
        "eventId": event.id,
        "eventCode": event.event_code,
        "registrationLink": link.registration_link,
        "qrCode": link.qr_code
    }


@router.get("/events")
def list_events(db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    """Events of the authenticated admin, or every event for a super admin"""
    events = event_service.list_events_for_admin(db, admin)
    return [serialize_event(e) for e in events]


@router.get("/events/by-code/{event_code}")
def get_event_by_code(event_code: str, db: Session = Depends(get_db)):
    """Public details shown on the registration page"""
    event = event_service.get_event_by_code(db, event_code)
    return {
        "purpose": event.purpose,
        "start_date": event.start_date.isoformat() if event.start_date else None,
        "end_date": event.end_date.isoformat() if event.end_date else None,
        "location": event.location
    }


@router.get("/events/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    """Event details with its registration link and registered users"""
    event = event_service.get_event_for_admin(db, event_id, admin)

    users = db.query(User).join(Registration, Registration.user_id == User.id).filter(
        Registration.event_id == event.id
    ).order_by(User.name.asc()).all()

    link = event.registration_link
    return {
        **serialize_event(event),
        "registration_link": link.registration_link if link else None,
        "qr_code": link.qr_code if link else None,
        "users": [{"id": u.id, "name": u.name, "email": u.email} for u in users]
    }


@router.put("/events/{event_id}")
def update_event(
    event_id: int,
    data: EventUpdate,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    event = event_service.update_event(db, event_id, admin, data)
    return {"message": "Event updated successfully.", "event": serialize_event(event)}


@router.delete("/events/{event_id}")
def delete_event(event_id: int, db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    event_service.delete_event(db, event_id, admin)
    return {"message": "Event deleted successfully."}


@router.post("/events/{event_id}/regenerate-qr")
def regenerate_qr(event_id: int, db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    """Replace the registration QR code of an event, the event code itself is kept"""
    link = event_service.regenerate_registration_qr(db, event_id, admin)
    return {
        "message": "QR Code regenerated successfully.",
        "registrationLink": link.registration_link,
        "qrCode": link.qr_code
    }


@router.post("/events/{event_id}/send-reminders")
def send_reminders(
    event_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    """Queue reminder emails for registered users who have not checked in yet"""
    user_ids = dispatcher.remind_all_unattended(db, event_id, admin, background_tasks)

    if not user_ids:
        return {
            "message": "No users to remind. Everyone registered has already attended or there are no registrations.",
            "count": 0
        }

    return {"message": f"Sending {len(user_ids)} reminder emails.", "count": len(user_ids)}
