"""Per-job access grant schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from database.models.jobs import AccessType


class JobAccessStatus(BaseModel):
    job_id: int
    has_access: bool


class JobAccessGrant(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    user_id: int
    access_type: AccessType
    granted_by: Optional[int] = None
    granted_at: datetime
    updated_at: Optional[datetime] = None
