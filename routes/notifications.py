from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.connection import get_db
from models.admin import Admin
from routes.admin import get_current_admin
from services.notifications import NotificationDispatcher, get_dispatcher, list_notifications

router = APIRouter()


@router.get("/notifications")
def get_notifications(db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    """
    Notification delivery logs, newest first
    Event admins only see logs of their own events
    """
    rows = list_notifications(db, admin)
    return [
        {
            "id": log.id,
            "user_id": log.user_id,
            "user_name": user_name,
            "event_id": log.event_id,
            "event_name": event_name,
            "type": log.type.value,
            "status": log.status.value,
            "error": log.error,
            "resent_from_id": log.resent_from_id,
            "sent_at": log.sent_at.isoformat() if log.sent_at else None
        }
        for log, user_name, event_name in rows
    ]


@router.post("/notifications/{notification_id}/resend")
def resend_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    dispatcher.resend(db, notification_id, admin)
    return {"message": "Notification resent successfully."}
