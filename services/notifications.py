"""
Notification dispatcher

Sends registration, attendance and reminder emails and appends one
NotificationLog row per attempt. Dispatch runs after the triggering
transaction has committed, in its own session, and never raises: a failed
send is recorded with status "failed" and can be resent later.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from fastapi import BackgroundTasks
from jinja2 import DictLoader, Environment, select_autoescape
from sqlalchemy.orm import Session

from database.connection import SessionLocal
from models.admin import Admin
from models.attendance import Attendance
from models.event import Event
from models.notification_log import NotificationLog, NotificationType, NotificationStatus
from models.registration import Registration
from models.user import User
from utils.checkin_token import checkin_payload
from utils.errors import (
    EventNotFoundError, UserNotFoundError, NotificationNotFoundError, NotificationDeliveryError
)
from utils.mailer import get_mailer
from utils.permissions import ensure_can_manage_event, is_super_admin
from utils.qr import encode_qr

logger = logging.getLogger(__name__)

REMINDER_WORKERS = int(os.getenv("REMINDER_WORKERS", 8))

# (subject, html, text)
Mail = Tuple[str, Optional[str], str]


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y") if value else "to be announced"


MAIL_TEMPLATES = {
    "registration.html": (
        "<p>Dear {{ user.name }},</p>"
        "<p>You have successfully registered for <strong>{{ event.purpose }}</strong>.</p>"
        "<p>Please present this QR code at the event for check-in:</p>"
        '<img src="{{ qr_image }}" alt="Your Event QR Code" />'
        "<p>We look forward to seeing you there!</p>"
    ),
    "registration.txt": (
        "Dear {{ user.name }},\n\nYou have successfully registered for {{ event.purpose }}. "
        "Your QR code data is: {{ qr_data }}\n\nPlease present this QR code at the event."
    ),
    "reminder.html": (
        "<p>Dear {{ user.name }},</p>"
        "<p>This is a friendly reminder for the upcoming event: <strong>{{ event.purpose }}</strong>.</p>"
        "<p>Date: {{ when }}</p>"
        "<p>Please present this QR code at the event for check-in:</p>"
        '<img src="{{ qr_image }}" alt="Your Event QR Code" />'
        "<p>We look forward to seeing you there!</p>"
    ),
    "reminder.txt": (
        "Dear {{ user.name }},\n\nThis is a reminder for {{ event.purpose }} on {{ when }}. "
        "Your QR code data is: {{ qr_data }}"
    ),
    "attendance.txt": (
        "Dear {{ user.name }},\n\nYour attendance for {{ event.purpose }} has been recorded on {{ recorded_at }}."
    ),
}

# HTML bodies are autoescaped, plain text bodies are not
mail_env = Environment(
    loader=DictLoader(MAIL_TEMPLATES),
    autoescape=select_autoescape(enabled_extensions=("html",)),
)


def _render(name: str, **context) -> str:
    return mail_env.get_template(name).render(**context)


def render_registration_mail(user: User, event: Event, qr_data: str, qr_image: str) -> Mail:
    context = dict(user=user, event=event, qr_data=qr_data, qr_image=qr_image)
    subject = f"Registration Confirmation for {event.purpose}"
    return subject, _render("registration.html", **context), _render("registration.txt", **context)


def render_reminder_mail(user: User, event: Event, qr_data: str, qr_image: str) -> Mail:
    context = dict(user=user, event=event, qr_data=qr_data, qr_image=qr_image, when=_format_date(event.start_date))
    subject = f"Reminder: {event.purpose}"
    return subject, _render("reminder.html", **context), _render("reminder.txt", **context)


def render_attendance_mail(user: User, event: Event) -> Mail:
    recorded_at = datetime.utcnow().strftime("%Y-%m-%d %H:%M UTC")
    subject = f"Attendance Recorded for {event.purpose}"
    return subject, None, _render("attendance.txt", user=user, event=event, recorded_at=recorded_at)


def render_mail(kind: NotificationType, user: User, event: Event) -> Mail:
    if kind == NotificationType.ATTENDANCE:
        return render_attendance_mail(user, event)

    qr_data = checkin_payload(user.id, event.id)
    qr_image = encode_qr(qr_data)
    if kind == NotificationType.REGISTRATION:
        return render_registration_mail(user, event, qr_data, qr_image)
    if kind == NotificationType.REMINDER:
        return render_reminder_mail(user, event, qr_data, qr_image)
    raise ValueError(f"Unknown notification type: {kind!r}")


class NotificationDispatcher:

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal, mailer=None,
                 max_workers: int = REMINDER_WORKERS):
        self.session_factory = session_factory
        self.mailer = mailer if mailer is not None else get_mailer()
        self.max_workers = max_workers

    def notify(self, kind: NotificationType, user_id: int, event_id: int,
               resent_from_id: Optional[int] = None) -> Optional[NotificationStatus]:
        """
        Send one notification and log the attempt

        Returns the logged status, or None when nothing could be logged
        (user or event gone, log store unavailable).
        """
        db = self.session_factory()
        try:
            user = db.query(User).filter(User.id == user_id).first()
            event = db.query(Event).filter(Event.id == event_id).first()
            if not user or not event:
                logger.warning("Skipping %s notification: user %s or event %s no longer exists",
                               kind.value, user_id, event_id)
                return None

            status, error = self._deliver(kind, user, event, resent=resent_from_id is not None)

            db.add(NotificationLog(
                user_id=user.id,
                event_id=event.id,
                type=kind,
                status=status,
                error=error,
                resent_from_id=resent_from_id,
            ))
            db.commit()
            return status
        except Exception:
            db.rollback()
            logger.exception("Could not log %s notification for user %s, event %s", kind.value, user_id, event_id)
            return None
        finally:
            db.close()

    def _deliver(self, kind: NotificationType, user: User, event: Event,
                 resent: bool = False) -> Tuple[NotificationStatus, Optional[str]]:
        try:
            subject, body, text = render_mail(kind, user, event)
            if resent:
                subject = f"[Resent] {subject}"
            self.mailer.send(user.email, subject, html=body, text=text)
        except Exception as e:
            logger.exception("Failed to send %s email to %s for event %s", kind.value, user.email, event.id)
            return NotificationStatus.FAILED, str(e)[:255] or e.__class__.__name__

        logger.info("%s email sent to %s for event %s", kind.value.capitalize(), user.email, event.id)
        return NotificationStatus.SENT, None

    def notify_many(self, kind: NotificationType, user_ids: Iterable[int], event_id: int) -> List[Optional[NotificationStatus]]:
        """Send the same kind of notification to many users in parallel, in no particular order"""
        user_ids = list(user_ids)
        if not user_ids:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(user_ids))) as executor:
            statuses = list(executor.map(lambda user_id: self.notify(kind, user_id, event_id), user_ids))

        sent = sum(1 for status in statuses if status == NotificationStatus.SENT)
        logger.info("%d/%d %s emails sent for event %s", sent, len(user_ids), kind.value, event_id)
        return statuses

    def resend(self, db: Session, log_id: int, admin: Admin) -> NotificationStatus:
        """
        Send a logged notification again, rebuilt from the current user and event

        The new attempt is appended as its own log row pointing at the original.
        """
        log = db.query(NotificationLog).filter(NotificationLog.id == log_id).first()
        if not log:
            raise NotificationNotFoundError()

        event = db.query(Event).filter(Event.id == log.event_id).first()
        user = db.query(User).filter(User.id == log.user_id).first()
        if not event or not user:
            raise UserNotFoundError("Associated user or event not found.")

        ensure_can_manage_event(admin, event, "You are not authorized to manage this notification.")

        kind, user_id, event_id, admin_id = log.type, user.id, event.id, admin.id
        # Release the read transaction before talking to the mail server
        db.rollback()

        status = self.notify(kind, user_id, event_id, resent_from_id=log_id)
        if status != NotificationStatus.SENT:
            logger.warning("Resend of notification %s failed", log_id)
            raise NotificationDeliveryError()

        logger.info("Notification %s resent by admin %s", log_id, admin_id)
        return status

    def remind_all_unattended(self, db: Session, event_id: int, admin: Admin,
                              background_tasks: BackgroundTasks) -> List[int]:
        """
        Queue a reminder for every registered user who has not checked in yet

        Returns the ids of the users being reminded.
        """
        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise EventNotFoundError()

        ensure_can_manage_event(admin, event, "You are not authorized to send reminders for this event.")

        registered = {
            user_id for (user_id,) in
            db.query(Registration.user_id).filter(Registration.event_id == event.id).all()
        }
        attended = {
            user_id for (user_id,) in
            db.query(Attendance.user_id).filter(Attendance.event_id == event.id).distinct().all()
        }
        user_ids = sorted(registered - attended)

        if user_ids:
            background_tasks.add_task(self.notify_many, NotificationType.REMINDER, user_ids, event.id)
        return user_ids


def list_notifications(db: Session, admin: Admin) -> list:
    """Notification logs with user and event names, newest first"""
    query = db.query(NotificationLog, User.name, Event.purpose).join(
        User, NotificationLog.user_id == User.id
    ).join(
        Event, NotificationLog.event_id == Event.id
    )
    if not is_super_admin(admin):
        query = query.filter(Event.admin_id == admin.id)
    return query.order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc()).all()


_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency returning the process-wide dispatcher"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
