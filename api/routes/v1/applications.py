"""
Application review endpoints.

The listing fetches the most recent applications the caller may see and
filters, sorts and pages them in memory.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import UserContext, get_db, require_permission, require_staff
from api.schemas.applications import (
    CandidateFilters,
    CandidateListResponse,
    CandidateView,
    SortOption,
    StatusUpdate,
    StatusUpdateResponse,
)
from api.services import applications as application_service
from api.services.candidate_views import build_listing
from core.config import settings
from core.middleware.authorization import Permission

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get(
    "",
    response_model=CandidateListResponse,
    summary="List Applications",
    description="Filter, sort and page recent applications. Requires application:read permission.",
)
async def list_applications(
    status: str = Query("All", description="pending, accepted, rejected or All"),
    location: Optional[str] = Query(None, description="Substring of candidate address or job location"),
    job_title: Optional[str] = Query(None),
    company: Optional[str] = Query(None),
    salary_min: Optional[float] = Query(None, ge=0, description="Lower bound on expected CTC"),
    salary_max: Optional[float] = Query(None, ge=0, description="Upper bound on expected CTC"),
    date_from: Optional[date] = Query(None, description="Applied on or after"),
    date_to: Optional[date] = Query(None, description="Applied on or before"),
    gender: Optional[str] = Query(None),
    disability: Optional[bool] = Query(None),
    sort_by: Optional[SortOption] = Query(None, description="Defaults to date_desc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.candidates_per_page, ge=1, le=100),
    context: UserContext = Depends(require_permission(Permission.APPLICATION_READ)),
    db: AsyncSession = Depends(get_db),
):
    filters = CandidateFilters(
        status=status,
        location=location,
        job_title=job_title,
        company=company,
        salary_min=salary_min,
        salary_max=salary_max,
        date_from=date_from,
        date_to=date_to,
        gender=gender,
        disability=disability,
    )
    candidates = await application_service.fetch_applications_with_access(
        db, context, status=status, date_from=date_from, date_to=date_to
    )
    return build_listing(
        candidates, filters, sort_by=sort_by, page=page, per_page=per_page, context=context
    )


@router.get(
    "/{application_id}",
    response_model=CandidateView,
    summary="Get Application",
    description="One application with the candidate's profile, education and experience.",
)
async def get_application(
    application_id: int = Path(..., description="Application ID"),
    context: UserContext = Depends(require_permission(Permission.APPLICATION_READ)),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.get_application(db, context, application_id)


@router.patch(
    "/{application_id}/status",
    response_model=StatusUpdateResponse,
    summary="Update Application Status",
    description="Move an application to pending, accepted or rejected.",
)
async def update_status(
    data: StatusUpdate,
    application_id: int = Path(..., description="Application ID"),
    context: UserContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.update_application_status(
        db, context, application_id, data.status
    )
