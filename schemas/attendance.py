from pydantic import BaseModel, Field


class AttendanceRecord(BaseModel):
    qr_data: str = Field(..., alias="qrData")

    class Config:
        populate_by_name = True
