import secrets
import string

from sqlalchemy.orm import Session

from models.event import Event

EVENT_CODE_ALPHABET = string.ascii_uppercase + string.digits
EVENT_CODE_LENGTH = 6


def generate_event_code(length: int = EVENT_CODE_LENGTH) -> str:
    """Random event code drawn uniformly from A-Z and 0-9"""
    return ''.join(secrets.choice(EVENT_CODE_ALPHABET) for _ in range(length))


def generate_unique_event_code(db: Session) -> str:
    """
    Generate an event code that no persisted event uses yet

    The check only sees committed events. The unique constraint on
    events.event_code settles concurrent creations, see services.events.create_event.
    """
    while True:
        code = generate_event_code()
        existing = db.query(Event.id).filter(Event.event_code == code).first()
        if not existing:
            return code
