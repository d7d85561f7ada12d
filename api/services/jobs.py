"""Job posting service functions."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.jobs import JobCreate, JobUpdate, check_range
from api.services.access_control import check_job_access, get_accessible_job_ids
from core.middleware.authorization import JobAccessDenied, UserContext
from core.middleware.error_handling import ResourceNotFound
from core.security import AuditAction, ResourceType, log_audit_event
from database.models.jobs import Job, JobStatus, JobType

logger = logging.getLogger(__name__)


def build_jobs_query(
    organization_id: int,
    location: Optional[str] = None,
    job_type: Optional[JobType] = None,
    company: Optional[str] = None,
    salary_min: Optional[float] = None,
    status: Optional[JobStatus] = None,
    job_ids: Optional[List[int]] = None,
):
    """Organization-scoped job selection with the listing filters applied."""
    query = select(Job).where(Job.organization_id == organization_id)

    if job_ids is not None:
        query = query.where(Job.id.in_(job_ids))
    if location:
        query = query.where(Job.job_location.ilike(f"%{location}%"))
    if job_type:
        query = query.where(Job.job_type == job_type)
    if company:
        query = query.where(Job.company_name.ilike(f"%{company}%"))
    if salary_min is not None:
        query = query.where(Job.min_salary >= salary_min)
    if status:
        query = query.where(Job.status == status)

    return query


async def list_jobs(
    session: AsyncSession,
    context: UserContext,
    location: Optional[str] = None,
    job_type: Optional[JobType] = None,
    company: Optional[str] = None,
    salary_min: Optional[float] = None,
    status: Optional[JobStatus] = None,
    limit: int = 18,
    offset: int = 0,
) -> Dict[str, Any]:
    """
    List the organization's jobs, newest first.

    TA-only callers see just the jobs they were granted.
    """
    organization_id = context.require_organization()

    job_ids = None
    if context.is_ta_only:
        job_ids = await get_accessible_job_ids(session, context)
        if not job_ids:
            return {"jobs": [], "total": 0}

    query = build_jobs_query(
        organization_id,
        location=location,
        job_type=job_type,
        company=company,
        salary_min=salary_min,
        status=status,
        job_ids=job_ids,
    )

    total_result = await session.execute(select(func.count()).select_from(query.subquery()))
    total = total_result.scalar() or 0

    result = await session.execute(
        query.order_by(Job.created_at.desc()).limit(limit).offset(offset)
    )
    return {"jobs": list(result.scalars().all()), "total": total}


async def get_job(session: AsyncSession, context: UserContext, job_id: int) -> Job:
    """
    Fetch one job of the caller's organization.

    Raises:
        ResourceNotFound: Missing job or job of another organization
        JobAccessDenied: TA-only caller without a grant
    """
    organization_id = context.require_organization()
    result = await session.execute(
        select(Job).where(Job.id == job_id, Job.organization_id == organization_id)
    )
    job = result.scalar_one_or_none()
    if not job:
        raise ResourceNotFound("Job", job_id)

    if not await check_job_access(session, context, job_id):
        raise JobAccessDenied("You do not have access to this job")

    return job


async def create_job(session: AsyncSession, context: UserContext, data: JobCreate) -> Job:
    organization_id = context.require_organization()

    job = Job(
        organization_id=organization_id,
        created_by=context.user_id,
        **data.model_dump(),
    )
    session.add(job)
    await session.commit()
    await session.refresh(job)

    log_audit_event(
        AuditAction.CREATE,
        ResourceType.JOB,
        resource_id=job.id,
        user_id=context.user_id,
        organization_id=organization_id,
        details={"job_title": job.job_title, "company_name": job.company_name},
    )
    logger.info(f"Job {job.id} created by user {context.user_id}")
    return job


async def update_job(
    session: AsyncSession,
    context: UserContext,
    job_id: int,
    data: JobUpdate,
) -> Job:
    """
    Apply a partial update.

    Raises:
        ValueError: Experience or salary pair invalid after merging
    """
    job = await get_job(session, context, job_id)
    updates = data.model_dump(exclude_unset=True)

    for min_field, max_field, label in (
        ("min_experience_needed", "max_experience_needed", "experience"),
        ("min_salary", "max_salary", "salary"),
    ):
        error = check_range(
            updates.get(min_field, getattr(job, min_field)),
            updates.get(max_field, getattr(job, max_field)),
            label,
        )
        if error:
            raise ValueError(error)

    for field, value in updates.items():
        setattr(job, field, value)

    await session.commit()
    await session.refresh(job)

    log_audit_event(
        AuditAction.UPDATE,
        ResourceType.JOB,
        resource_id=job.id,
        user_id=context.user_id,
        organization_id=job.organization_id,
        details={"fields": sorted(updates)},
    )
    return job


async def delete_job(session: AsyncSession, context: UserContext, job_id: int) -> None:
    job = await get_job(session, context, job_id)
    await session.delete(job)
    await session.commit()

    log_audit_event(
        AuditAction.DELETE,
        ResourceType.JOB,
        resource_id=job_id,
        user_id=context.user_id,
        organization_id=context.organization_id,
    )
    logger.info(f"Job {job_id} deleted by user {context.user_id}")
