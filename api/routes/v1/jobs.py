"""
Job posting management endpoints.

Admin and HR manage postings; TA users only see the postings they were
granted access to.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    UserContext,
    get_db,
    get_job_pagination,
    require_job_create,
    require_job_delete,
    require_job_update,
    require_permission,
)
from api.schemas.applications import CandidateFilters, CandidateListResponse, SortOption
from api.schemas.common import PaginatedResponse, PaginationParams
from api.schemas.jobs import JobCreate, JobResponse, JobUpdate
from api.services import applications as application_service
from api.services import jobs as job_service
from api.services.candidate_views import build_listing
from core.config import settings
from core.middleware.authorization import Permission
from database.models.jobs import JobStatus, JobType

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "",
    response_model=PaginatedResponse[JobResponse],
    summary="List Jobs",
    description="List the organization's job postings, newest first. Requires job:read permission.",
)
async def list_jobs(
    location: Optional[str] = Query(None, description="Substring of the job location"),
    job_type: Optional[JobType] = Query(None, description="Exact job type"),
    company: Optional[str] = Query(None, description="Substring of the company name"),
    salary_min: Optional[float] = Query(None, ge=0, description="Minimum offered salary"),
    status: Optional[JobStatus] = Query(None, description="Posting status"),
    pagination: PaginationParams = Depends(get_job_pagination),
    context: UserContext = Depends(require_permission(Permission.JOB_READ)),
    db: AsyncSession = Depends(get_db),
):
    result = await job_service.list_jobs(
        db,
        context,
        location=location,
        job_type=job_type,
        company=company,
        salary_min=salary_min,
        status=status,
        limit=pagination.page_size,
        offset=pagination.offset,
    )
    return PaginatedResponse[JobResponse].create(
        items=[JobResponse.model_validate(job) for job in result["jobs"]],
        total=result["total"],
        pagination=pagination,
    )


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
    description="Publish a job posting. Admin or HR only.",
)
async def create_job(
    data: JobCreate,
    context: UserContext = Depends(require_job_create),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.create_job(db, context, data)


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get Job Details",
    description="Get one job posting. Requires job:read permission and, for TA users, an access grant.",
)
async def get_job(
    job_id: int = Path(..., description="Job ID"),
    context: UserContext = Depends(require_permission(Permission.JOB_READ)),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.get_job(db, context, job_id)


@router.patch(
    "/{job_id}",
    response_model=JobResponse,
    summary="Update Job",
    description="Partially update a job posting. Admin or HR only.",
)
async def update_job(
    data: JobUpdate,
    job_id: int = Path(..., description="Job ID"),
    context: UserContext = Depends(require_job_update),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.update_job(db, context, job_id, data)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Job",
    description="Delete a job posting with its applications. Admin or HR only.",
)
async def delete_job(
    job_id: int = Path(..., description="Job ID"),
    context: UserContext = Depends(require_job_delete),
    db: AsyncSession = Depends(get_db),
):
    await job_service.delete_job(db, context, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{job_id}/applications",
    response_model=CandidateListResponse,
    summary="List Job Applications",
    description="Applications received for one job. Requires application:read permission.",
)
async def list_job_applications(
    job_id: int = Path(..., description="Job ID"),
    application_status: str = Query("All", alias="status", description="pending, accepted, rejected or All"),
    sort_by: Optional[SortOption] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.candidates_per_page, ge=1, le=100),
    context: UserContext = Depends(require_permission(Permission.APPLICATION_READ)),
    db: AsyncSession = Depends(get_db),
):
    # 404 / 403 before listing
    await job_service.get_job(db, context, job_id)

    candidates = await application_service.fetch_applications_with_access(
        db, context, status=application_status, job_id=job_id
    )
    return build_listing(
        candidates,
        CandidateFilters(status=application_status),
        sort_by=sort_by,
        page=page,
        per_page=per_page,
        context=context,
    )
