"""Application and candidate listing schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from database.models.applications import ApplicationStatus


ALL_STATUSES = "All"


class SortOption(str, Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    DATE_ASC = "date_asc"
    DATE_DESC = "date_desc"
    SALARY_ASC = "salary_asc"
    SALARY_DESC = "salary_desc"


class CandidateFilters(BaseModel):
    """Client-side filters applied to the fetched candidate set."""

    status: str = ALL_STATUSES
    location: Optional[str] = None
    job_title: Optional[str] = None
    company: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    gender: Optional[str] = None
    disability: Optional[bool] = None


class EducationView(BaseModel):
    college_university: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    grade_percentage: Optional[float] = None
    is_current: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ExperienceView(BaseModel):
    company_name: str
    job_title: str
    job_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    currently_working: bool = False


class CandidateView(BaseModel):
    """An application flattened with its candidate profile and job."""

    application_id: int
    job_id: int
    profile_id: int
    application_status: ApplicationStatus
    applied_date: datetime

    name: str
    candidate_email: str
    mobile_number: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    disability: Optional[bool] = None
    dob: Optional[date] = None
    resume_link: Optional[str] = None
    portfolio_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    additional_doc_link: Optional[str] = None
    current_ctc: Optional[float] = None
    expected_ctc: Optional[float] = None
    notice_period: Optional[str] = None

    job_title: str
    company_name: str
    job_location: Optional[str] = None
    job_type: Optional[str] = None

    education: list[EducationView] = Field(default_factory=list)
    experience: list[ExperienceView] = Field(default_factory=list)
    has_access: bool = True


class PaginationState(BaseModel):
    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class ApplicationStats(BaseModel):
    total: int = 0
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    today: int = 0
    this_week: int = 0
    this_month: int = 0


class CandidateListResponse(BaseModel):
    candidates: list[CandidateView]
    pagination: PaginationState
    stats: ApplicationStats


class StatusUpdate(BaseModel):
    # Free-form so that bad values get the descriptive 400 from the service
    status: str = Field(min_length=1, max_length=50)


class StatusUpdateResponse(BaseModel):
    application_id: int
    status: ApplicationStatus
    updated_at: datetime
