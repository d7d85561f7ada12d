"""Per-job access grants for talent-acquisition users."""

from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.middleware.authorization import UserContext
from core.middleware.error_handling import ResourceNotFound
from core.security import AuditAction, ResourceType, log_audit_event
from core.utils.datetime import now
from database.models.jobs import AccessType, Job, JobAccessControl
from database.models.organizations import StaffRole
from database.models.users import UserProfile

logger = logging.getLogger(__name__)


async def check_job_access(session: AsyncSession, context: UserContext, job_id: int) -> bool:
    """
    Whether the caller may view ``job_id``.

    Admin and HR see every job of their organization, TA users only the jobs
    they hold a ``granted`` record for; any other caller sees nothing.
    """
    if context.has_full_access:
        return True
    if StaffRole.TA not in context.roles:
        return False

    result = await session.execute(
        select(JobAccessControl.id).where(
            JobAccessControl.job_id == job_id,
            JobAccessControl.user_id == context.user_id,
            JobAccessControl.access_type == AccessType.GRANTED,
        )
    )
    return result.scalar_one_or_none() is not None


async def get_accessible_job_ids(session: AsyncSession, context: UserContext) -> list[int]:
    """Ids of the jobs the caller holds a ``granted`` record for."""
    result = await session.execute(
        select(JobAccessControl.job_id).where(
            JobAccessControl.user_id == context.user_id,
            JobAccessControl.access_type == AccessType.GRANTED,
        )
    )
    return list(result.scalars().all())


async def _get_org_job(session: AsyncSession, organization_id: int, job_id: int) -> Job:
    result = await session.execute(
        select(Job).where(Job.id == job_id, Job.organization_id == organization_id)
    )
    job = result.scalar_one_or_none()
    if not job:
        raise ResourceNotFound("Job", job_id)
    return job


async def check_job_access_in_organization(
    session: AsyncSession,
    context: UserContext,
    job_id: int,
) -> bool:
    """
    ``check_job_access`` for a job id supplied by the client.

    Raises:
        ResourceNotFound: Unknown job or a job of another organization
    """
    organization_id = context.require_organization()
    await _get_org_job(session, organization_id, job_id)
    return await check_job_access(session, context, job_id)


async def list_job_access(
    session: AsyncSession,
    context: UserContext,
    job_id: int,
) -> list[JobAccessControl]:
    """All access records (granted and revoked) of a job."""
    organization_id = context.require_organization()
    await _get_org_job(session, organization_id, job_id)

    result = await session.execute(
        select(JobAccessControl)
        .where(JobAccessControl.job_id == job_id)
        .order_by(JobAccessControl.granted_at.desc())
    )
    return list(result.scalars().all())


async def set_job_access(
    session: AsyncSession,
    context: UserContext,
    job_id: int,
    user_id: int,
    access_type: AccessType,
) -> JobAccessControl:
    """
    Grant or revoke a user's access to a job.

    The record for (job, user) is created on first grant and flipped
    afterwards. The target must belong to the caller's organization.

    Raises:
        ResourceNotFound: Unknown job, or user outside the organization
    """
    organization_id = context.require_organization()
    await _get_org_job(session, organization_id, job_id)

    user_result = await session.execute(
        select(UserProfile.id).where(
            UserProfile.id == user_id,
            UserProfile.organization_id == organization_id,
        )
    )
    if user_result.scalar_one_or_none() is None:
        raise ResourceNotFound("User", user_id)

    result = await session.execute(
        select(JobAccessControl).where(
            JobAccessControl.job_id == job_id,
            JobAccessControl.user_id == user_id,
        )
    )
    record: Optional[JobAccessControl] = result.scalar_one_or_none()
    timestamp = now()

    if record is None:
        if access_type == AccessType.REVOKED:
            raise ResourceNotFound("Access grant")
        record = JobAccessControl(
            job_id=job_id,
            user_id=user_id,
            access_type=access_type,
            granted_by=context.user_id,
            granted_at=timestamp,
            updated_at=timestamp,
        )
        session.add(record)
    else:
        record.access_type = access_type
        record.updated_at = timestamp
        if access_type == AccessType.GRANTED:
            record.granted_by = context.user_id
            record.granted_at = timestamp

    await session.commit()
    await session.refresh(record)

    log_audit_event(
        AuditAction.GRANT_ACCESS if access_type == AccessType.GRANTED else AuditAction.REVOKE_ACCESS,
        ResourceType.JOB_ACCESS,
        resource_id=job_id,
        user_id=context.user_id,
        organization_id=organization_id,
        details={"target_user_id": user_id},
    )
    logger.info(f"Job {job_id} access {access_type.value} for user {user_id} by {context.user_id}")
    return record
