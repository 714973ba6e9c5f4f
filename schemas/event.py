from pydantic import BaseModel, Field
from datetime import date, time
from typing import Optional


class EventCreate(BaseModel):
    purpose: str = Field(..., min_length=1, max_length=255)
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    start_time: Optional[time] = Field(None, alias="startTime")
    end_time: Optional[time] = Field(None, alias="endTime")
    location: Optional[str] = Field(None, max_length=255)

    class Config:
        populate_by_name = True


class EventUpdate(EventCreate):
    pass
