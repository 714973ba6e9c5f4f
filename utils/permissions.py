from models.admin import Admin, Role
from models.event import Event
from utils.errors import UnauthorizedError


def can_manage_event(admin: Admin, event: Event) -> bool:
    """Super admins manage every event, event admins only the events they own"""
    if admin.role == Role.SUPER_ADMIN:
        return True
    if admin.role == Role.EVENT_ADMIN:
        return event.admin_id == admin.id
    raise ValueError(f"Unhandled admin role: {admin.role!r}")


def ensure_can_manage_event(admin: Admin, event: Event, detail: str = None) -> None:
    if not can_manage_event(admin, event):
        raise UnauthorizedError(detail)


def is_super_admin(admin: Admin) -> bool:
    return admin.role == Role.SUPER_ADMIN
