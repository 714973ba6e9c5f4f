from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session

from database.connection import get_db
from models.admin import Admin
from routes.admin import get_current_admin
from schemas.user import UserRegister, UserImport
from services.notifications import NotificationDispatcher, get_dispatcher
from services.registrations import register_attendee, import_registrations

router = APIRouter()


@router.post("/users/register", status_code=201)
def register_user(
    data: UserRegister,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    """
    Register for an event with its event code
    An existing account is reused when the password matches
    """
    user, event = register_attendee(db, data, background_tasks, dispatcher)
    return {
        "message": "Registration successful! You can now log in.",
        "userId": user.id,
        "eventId": event.id
    }


@router.post("/users/import", status_code=201)
def import_users(data: UserImport, db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    """Register existing users for events from spreadsheet rows (email, eventCode)"""
    imported = import_registrations(db, admin, data.rows)
    return {
        "message": f"{imported} new user registrations were imported successfully.",
        "imported": imported
    }
