from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session
from typing import Optional

from database.connection import get_db
from models.admin import Admin
from routes.admin import get_current_admin
from schemas.attendance import AttendanceRecord
from services.attendance import record_attendance, list_attendance, attendance_summary
from services.notifications import NotificationDispatcher, get_dispatcher

router = APIRouter()


@router.post("/attendance/record")
def record(
    data: AttendanceRecord,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    """Record attendance from a scanned check-in QR code"""
    attendance, user = record_attendance(db, data.qr_data, admin, background_tasks, dispatcher)
    return {
        "message": f"Attendance recorded for {user.name}",
        "userName": user.name,
        "attendanceId": attendance.id,
        "time": attendance.time.isoformat()
    }


@router.get("/attendance")
def get_attendance(
    event_id: Optional[int] = None,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    rows = list_attendance(db, admin, event_id)
    return [
        {
            "id": attendance.id,
            "userId": attendance.user_id,
            "eventId": attendance.event_id,
            "userName": user_name,
            "eventName": event_name,
            "time": attendance.time.isoformat()
        }
        for attendance, user_name, event_name in rows
    ]


@router.get("/attendance/summary")
def get_attendance_summary(db: Session = Depends(get_db), admin: Admin = Depends(get_current_admin)):
    return attendance_summary(db, admin)
