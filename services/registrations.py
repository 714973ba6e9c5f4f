import logging
from typing import List, Tuple

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.admin import Admin
from models.event import Event
from models.notification_log import NotificationType
from models.registration import Registration
from models.user import User
from schemas.user import UserRegister, ImportRow
from services.events import get_event_by_code
from services.notifications import NotificationDispatcher
from utils.errors import AccountConflictError, DuplicateRegistrationError, ImportValidationError
from utils.permissions import can_manage_event

logger = logging.getLogger(__name__)


def is_registered(db: Session, user_id: int, event_id: int) -> bool:
    return db.query(Registration.id).filter(
        Registration.user_id == user_id,
        Registration.event_id == event_id
    ).first() is not None


def register_user_for_event(db: Session, user: User, event: Event) -> Registration:
    """
    Register a user for an event inside the caller's transaction
    Only flushes, the caller commits or rolls back.
    """
    if is_registered(db, user.id, event.id):
        raise DuplicateRegistrationError()

    registration = Registration(user_id=user.id, event_id=event.id)
    db.add(registration)
    db.flush()
    return registration


def register_attendee(db: Session, data: UserRegister, background_tasks: BackgroundTasks,
                      dispatcher: NotificationDispatcher) -> Tuple[User, Event]:
    """
    Self-registration with an event code

    Looks up the event, reuses the account with this email when the password
    matches (or creates it), and registers it for the event, all in one
    transaction. The confirmation email is sent after commit.
    """
    created = False
    try:
        event = get_event_by_code(db, data.event_code)

        user = db.query(User).filter(User.email == data.email).first()
        if user:
            if not user.verify_password(data.password):
                raise AccountConflictError(
                    "An account with this email already exists, but the password was incorrect. "
                    "Please try again with the correct password."
                )
        else:
            user = User(
                name=data.name,
                email=data.email,
                password_hash=User.hash_password(data.password)
            )
            db.add(user)
            created = True
            db.flush()

        register_user_for_event(db, user, event)
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same account or registration first
        db.rollback()
        if created:
            raise AccountConflictError("An account with this email already exists.")
        raise DuplicateRegistrationError()
    except Exception:
        db.rollback()
        raise

    logger.info("User %s registered for event %s", user.id, event.id)
    background_tasks.add_task(dispatcher.notify, NotificationType.REGISTRATION, user.id, event.id)
    return user, event


def import_registrations(db: Session, admin: Admin, rows: List[ImportRow]) -> int:
    """
    Register existing users for events from imported rows

    All or nothing: any invalid row rolls the whole import back. Rows are
    numbered from 2, as in a spreadsheet with a header row. Returns the number
    of new registrations.
    """
    errors = []
    imported = 0

    try:
        for index, row in enumerate(rows):
            row_num = index + 2
            email = row.email
            event_code = row.event_code.strip().upper()

            if not email or not event_code:
                errors.append(f"Row {row_num}: Missing required columns (email, eventCode).")
                continue

            user = db.query(User).filter(User.email == email).first()
            if not user:
                errors.append(
                    f"Row {row_num}: User with email '{email}' not found. Please ask the user to register first."
                )
                continue

            event = db.query(Event).filter(Event.event_code == event_code).first()
            if not event:
                errors.append(f"Row {row_num}: Event with code '{event_code}' not found.")
                continue

            if not can_manage_event(admin, event):
                errors.append(f"Row {row_num}: You are not authorized to register users for event '{event_code}'.")
                continue

            try:
                register_user_for_event(db, user, event)
            except DuplicateRegistrationError:
                continue
            imported += 1

        if errors:
            db.rollback()
            raise ImportValidationError({
                "message": "Import failed due to validation errors. No users were imported.",
                "errors": errors,
            })

        db.commit()
    except ImportValidationError:
        raise
    except IntegrityError:
        db.rollback()
        raise DuplicateRegistrationError("A registration in this import was created concurrently, please retry.")
    except Exception:
        db.rollback()
        raise

    logger.info("Admin %s imported %d registrations", admin.id, imported)
    return imported
