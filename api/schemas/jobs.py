"""Job posting schemas."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from api.schemas.common import TimestampMixin
from database.models.jobs import JobLocationType, JobStatus, JobType, WorkingType


def check_range(minimum, maximum, label: str) -> Optional[str]:
    """
    Validate a min/max pair.

    Returns:
        Error message, or None when the pair is complete and ordered
    """
    if minimum is None or maximum is None:
        return f"Both minimum and maximum {label} are required"
    if minimum > maximum:
        return f"Minimum {label} cannot be greater than maximum"
    return None


def strip_text(v):
    if isinstance(v, str):
        return v.strip()
    return v


class JobBase(BaseModel):
    company_name: str = Field(min_length=1, max_length=255)
    company_logo_url: Optional[str] = Field(None, max_length=1024)
    job_title: str = Field(min_length=1, max_length=255)
    job_type: JobType
    job_location_type: JobLocationType
    job_location: str = Field(min_length=1, max_length=255)
    working_type: WorkingType
    job_description: str = Field(min_length=1, description="HTML produced by the editor")
    requirements: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    application_deadline: Optional[date] = None


class JobCreate(JobBase):
    """Schema for creating a job posting."""

    min_experience_needed: Optional[int] = Field(None, ge=0, le=60)
    max_experience_needed: Optional[int] = Field(None, ge=0, le=60)
    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    status: JobStatus = JobStatus.ACTIVE

    @field_validator("company_name", "job_title", "job_location", "job_description", mode="before")
    @classmethod
    def strip_fields(cls, v):
        return strip_text(v)

    @model_validator(mode="after")
    def check_ranges(self) -> "JobCreate":
        for minimum, maximum, label in (
            (self.min_experience_needed, self.max_experience_needed, "experience"),
            (self.min_salary, self.max_salary, "salary"),
        ):
            error = check_range(minimum, maximum, label)
            if error:
                raise ValueError(error)
        return self


# Columns a partial update may change but never clear
NON_NULLABLE_FIELDS = (
    "company_name",
    "job_title",
    "job_type",
    "job_location_type",
    "job_location",
    "working_type",
    "job_description",
    "status",
)


class JobUpdate(BaseModel):
    """
    Partial update. Experience and salary pairs are re-checked against the
    stored values by the service.
    """

    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    company_logo_url: Optional[str] = Field(None, max_length=1024)
    job_title: Optional[str] = Field(None, min_length=1, max_length=255)
    job_type: Optional[JobType] = None
    job_location_type: Optional[JobLocationType] = None
    job_location: Optional[str] = Field(None, min_length=1, max_length=255)
    working_type: Optional[WorkingType] = None
    min_experience_needed: Optional[int] = Field(None, ge=0, le=60)
    max_experience_needed: Optional[int] = Field(None, ge=0, le=60)
    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    job_description: Optional[str] = Field(None, min_length=1)
    requirements: Optional[list[str]] = None
    benefits: Optional[list[str]] = None
    application_deadline: Optional[date] = None
    status: Optional[JobStatus] = None

    @field_validator("company_name", "job_title", "job_location", "job_description", mode="before")
    @classmethod
    def strip_fields(cls, v):
        return strip_text(v)

    @model_validator(mode="after")
    def reject_null_required(self) -> "JobUpdate":
        cleared = sorted(
            name for name in NON_NULLABLE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class JobResponse(JobBase, TimestampMixin):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    created_by: Optional[int] = None
    min_experience_needed: int
    max_experience_needed: int
    min_salary: float
    max_salary: float
    status: JobStatus
    requirements: Optional[list[str]] = None
    benefits: Optional[list[str]] = None
