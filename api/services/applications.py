"""Application service functions."""

from datetime import date
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.applications import (
    ALL_STATUSES,
    CandidateView,
    EducationView,
    ExperienceView,
)
from api.services.access_control import check_job_access, get_accessible_job_ids
from core.config import settings
from core.middleware.authorization import JobAccessDenied, UserContext
from core.middleware.error_handling import ResourceNotFound
from core.security import AuditAction, ResourceType, log_audit_event
from core.utils.datetime import end_of_day, now, start_of_day
from database.models.applications import ApplicationStatus, JobApplication
from database.models.candidates import CandidateProfile
from database.models.jobs import Job

logger = logging.getLogger(__name__)


def parse_status(value: str) -> ApplicationStatus:
    """
    Lower-case and validate an application status.

    Raises:
        ValueError: Not one of pending, accepted, rejected
    """
    try:
        return ApplicationStatus(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValueError(f"Invalid status: {value}. Must be one of: {allowed}")


def to_candidate_view(application: JobApplication, has_access: bool = True) -> CandidateView:
    """Flatten an application with its profile and job."""
    profile = application.profile
    job = application.job

    return CandidateView(
        application_id=application.id,
        job_id=application.job_id,
        profile_id=application.profile_id,
        application_status=application.application_status,
        applied_date=application.applied_date,
        name=profile.name,
        candidate_email=profile.candidate_email,
        mobile_number=profile.mobile_number,
        address=profile.address,
        gender=profile.gender,
        disability=profile.disability,
        dob=profile.dob,
        resume_link=profile.resume_link,
        portfolio_url=profile.portfolio_url,
        linkedin_url=profile.linkedin_url,
        additional_doc_link=profile.additional_doc_link,
        current_ctc=profile.current_ctc,
        expected_ctc=profile.expected_ctc,
        notice_period=profile.notice_period,
        job_title=job.job_title,
        company_name=job.company_name,
        job_location=job.job_location,
        job_type=job.job_type.value if job.job_type else None,
        education=[
            EducationView(
                college_university=e.college_university,
                degree=e.degree,
                field_of_study=e.field_of_study,
                grade_percentage=e.grade_percentage,
                is_current=e.is_current,
                start_date=e.start_date,
                end_date=e.end_date,
            )
            for e in profile.education
        ],
        experience=[
            ExperienceView(
                company_name=x.company_name,
                job_title=x.job_title,
                job_type=x.job_type,
                start_date=x.start_date,
                end_date=x.end_date,
                currently_working=x.currently_working,
            )
            for x in profile.experience
        ],
        has_access=has_access,
    )


def _with_details(query):
    return query.options(
        selectinload(JobApplication.job),
        selectinload(JobApplication.profile).selectinload(CandidateProfile.education),
        selectinload(JobApplication.profile).selectinload(CandidateProfile.experience),
    )


async def fetch_applications_with_access(
    session: AsyncSession,
    context: UserContext,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    job_id: Optional[int] = None,
) -> List[CandidateView]:
    """
    Most recent applications of the caller's organization.

    TA-only callers only get applications to jobs they were granted. At most
    ``APPLICATIONS_FETCH_LIMIT`` rows are returned, newest first.
    """
    organization_id = context.require_organization()

    query = (
        select(JobApplication)
        .join(Job, JobApplication.job_id == Job.id)
        .where(Job.organization_id == organization_id)
    )

    if context.is_ta_only:
        job_ids = await get_accessible_job_ids(session, context)
        if not job_ids:
            logger.info(f"User {context.user_id} has no job grants, returning no applications")
            return []
        query = query.where(JobApplication.job_id.in_(job_ids))

    if job_id is not None:
        query = query.where(JobApplication.job_id == job_id)
    if status and status != ALL_STATUSES:
        query = query.where(JobApplication.application_status == parse_status(status))
    if date_from:
        query = query.where(JobApplication.applied_date >= start_of_day(date_from))
    if date_to:
        query = query.where(JobApplication.applied_date <= end_of_day(date_to))

    query = _with_details(query).order_by(JobApplication.applied_date.desc())
    result = await session.execute(query.limit(settings.applications_fetch_limit))

    return [to_candidate_view(application) for application in result.scalars().all()]


async def _get_org_application(
    session: AsyncSession,
    context: UserContext,
    application_id: int,
) -> JobApplication:
    organization_id = context.require_organization()
    result = await session.execute(
        _with_details(
            select(JobApplication)
            .join(Job, JobApplication.job_id == Job.id)
            .where(
                JobApplication.id == application_id,
                Job.organization_id == organization_id,
            )
        )
    )
    application = result.scalar_one_or_none()
    if not application:
        raise ResourceNotFound("Application", application_id)

    if not await check_job_access(session, context, application.job_id):
        raise JobAccessDenied("You do not have access to this application")

    return application


async def get_application(
    session: AsyncSession,
    context: UserContext,
    application_id: int,
) -> CandidateView:
    application = await _get_org_application(session, context, application_id)
    log_audit_event(
        AuditAction.VIEW,
        ResourceType.APPLICATION,
        resource_id=application_id,
        user_id=context.user_id,
        organization_id=context.organization_id,
    )
    return to_candidate_view(application)


async def update_application_status(
    session: AsyncSession,
    context: UserContext,
    application_id: int,
    new_status: str,
) -> Dict[str, Any]:
    """
    Move an application to pending, accepted or rejected.

    Returns:
        ``{application_id, status, updated_at}``
    """
    status = parse_status(new_status)
    application = await _get_org_application(session, context, application_id)
    previous = application.application_status

    application.application_status = status
    application.updated_at = now()
    await session.commit()

    log_audit_event(
        AuditAction.STATUS_CHANGE,
        ResourceType.APPLICATION,
        resource_id=application_id,
        user_id=context.user_id,
        organization_id=context.organization_id,
        details={"from": previous.value, "to": status.value},
    )
    logger.info(
        f"Application {application_id} moved from {previous.value} to {status.value} "
        f"by user {context.user_id}"
    )

    return {
        "application_id": application.id,
        "status": application.application_status,
        "updated_at": application.updated_at,
    }
