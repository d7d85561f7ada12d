"""Registration, login and session schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from database.models.organizations import StaffRole


class RegisterRequest(BaseModel):
    """Self-service staff registration."""

    name: str = Field(min_length=1, max_length=255, description="Full name")
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: str = Field(min_length=10, max_length=30, description="Contact phone number")

    @field_validator("name", "phone", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = Field(description="Token lifetime in seconds")


class ProfileData(BaseModel):
    """The caller's own profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    organization_id: Optional[int] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class OrganizationData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str


class RoleAssignmentData(BaseModel):
    """An active role held by the caller."""

    role: StaffRole
    display_name: str
    organization_id: int
    assigned_at: datetime


class CompleteUserData(BaseModel):
    """Profile, organization and roles in one payload."""

    profile: ProfileData
    organization: Optional[OrganizationData] = None
    roles: list[RoleAssignmentData] = Field(default_factory=list)


class AuthResponse(TokenResponse):
    user: CompleteUserData
