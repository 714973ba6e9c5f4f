from pydantic import BaseModel, Field, field_validator
from typing import List

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


def normalize_email(value):
    """Emails are matched case-insensitively, so they are stored lowercased"""
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)
    event_code: str = Field(..., min_length=1, max_length=6, alias="eventCode")

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return normalize_email(value)

    class Config:
        populate_by_name = True


class ImportRow(BaseModel):
    email: str = ""
    event_code: str = Field("", alias="eventCode")

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return normalize_email(value)

    class Config:
        populate_by_name = True


class UserImport(BaseModel):
    rows: List[ImportRow] = Field(..., min_length=1)
