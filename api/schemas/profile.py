"""Profile settings schemas."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ProfileUpdate(BaseModel):
    """Partial update of the caller's profile."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=30)

    @field_validator("full_name", "phone", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)


class NotificationPreferences(BaseModel):
    """E-mail notification switches stored on the profile."""

    applications: bool = True
    weekly_summary: bool = True
    product_updates: bool = False
    industry_updates: bool = False
    community_events: bool = False
    other_notifications: bool = False
