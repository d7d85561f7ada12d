"""Organization, membership and role schemas."""

from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from api.schemas.common import TimestampMixin
from database.models.organizations import StaffRole


class OrganizationResponse(TimestampMixin):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str


class MemberResponse(BaseModel):
    """A member of the organization with the role currently assigned."""

    id: int
    name: str
    email: str
    role: StaffRole
    assigned_by: Optional[int] = None
    assigned_at: Optional[datetime] = None
    is_member_active: bool
    is_role_active: bool
    status: Literal["active", "inactive"]


class AssignRoleRequest(BaseModel):
    email: EmailStr
    role: StaffRole

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: StaffRole
    display_name: str
    description: Optional[str] = None
    permissions: Optional[dict[str, Any]] = None
