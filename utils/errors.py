"""
HTTP errors raised by the services
Each error class maps one failure kind to its status code, so clients can
branch on the status while still getting a single descriptive message.
"""
from typing import Any

from fastapi import HTTPException


class AppError(HTTPException):
    status_code = 500
    default_detail: Any = "Internal server error"

    def __init__(self, detail: Any = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


# Validation
class InvalidTokenError(AppError):
    status_code = 400
    default_detail = "Invalid QR code data"


class NotRegisteredError(AppError):
    status_code = 400
    default_detail = "User is not registered for this event."


class ImportValidationError(AppError):
    status_code = 400
    default_detail = "Import failed due to validation errors. No users were imported."


# Unauthorized
class UnauthorizedError(AppError):
    status_code = 403
    default_detail = "You are not authorized to manage this event."


# Not found
class EventNotFoundError(AppError):
    status_code = 404
    default_detail = "Event not found."


class UserNotFoundError(AppError):
    status_code = 404
    default_detail = "User not found."


class NotificationNotFoundError(AppError):
    status_code = 404
    default_detail = "Notification log not found."


# Conflict
class DuplicateRegistrationError(AppError):
    status_code = 409
    default_detail = "You are already registered for this event."


class DuplicateAttendanceError(AppError):
    status_code = 409
    default_detail = "Attendance already recorded."


class AccountConflictError(AppError):
    status_code = 409
    default_detail = "An account with this email already exists."


# External / internal
class NotificationDeliveryError(AppError):
    status_code = 502
    default_detail = "Failed to resend notification."


class EventCodeAllocationError(AppError):
    status_code = 503
    default_detail = "Could not allocate a unique event code, please try again."
