from pydantic import BaseModel, Field, field_validator
from typing import Optional

from schemas.user import EMAIL_PATTERN, normalize_email


class AdminRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str
    institution: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        problems = []
        if not 8 <= len(value) <= 100:
            problems.append("be between 8 and 100 characters long")
        if not any(c.isupper() for c in value):
            problems.append("contain an uppercase letter")
        if not any(c.islower() for c in value):
            problems.append("contain a lowercase letter")
        if not any(c.isdigit() for c in value):
            problems.append("contain at least one number")
        if any(c.isspace() for c in value):
            problems.append("not contain spaces")
        if problems:
            raise ValueError(f"Password is not strong enough. It must: {', '.join(problems)}.")
        return value


class AdminLogin(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return normalize_email(value)
