from database.connection import Base
from models.admin import Admin, Role
from models.event import Event
from models.event_registration_link import EventRegistrationLink
from models.user import User
from models.registration import Registration
from models.attendance import Attendance
from models.notification_log import NotificationLog, NotificationType, NotificationStatus

__all__ = [
    "Base", "Admin", "Role", "Event", "EventRegistrationLink", "User", "Registration",
    "Attendance", "NotificationLog", "NotificationType", "NotificationStatus",
]
