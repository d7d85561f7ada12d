"""Per-job access grant endpoints."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import UserContext, get_db, get_user_context, require_permission
from api.schemas.access_control import JobAccessGrant, JobAccessStatus
from api.services import access_control as access_service
from core.middleware.authorization import Permission
from database.models.jobs import AccessType

router = APIRouter(prefix="/jobs", tags=["access-control"])


@router.get(
    "/{job_id}/access/me",
    response_model=JobAccessStatus,
    summary="Check My Job Access",
    description="Whether the caller may view the job.",
)
async def check_my_access(
    job_id: int = Path(..., description="Job ID"),
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    has_access = await access_service.check_job_access_in_organization(db, context, job_id)
    return {"job_id": job_id, "has_access": has_access}


@router.get(
    "/{job_id}/access",
    response_model=list[JobAccessGrant],
    summary="List Job Access",
    description="Access records of a job. Requires job:manage_access permission.",
)
async def list_access(
    job_id: int = Path(..., description="Job ID"),
    context: UserContext = Depends(require_permission(Permission.JOB_MANAGE_ACCESS)),
    db: AsyncSession = Depends(get_db),
):
    return await access_service.list_job_access(db, context, job_id)


@router.put(
    "/{job_id}/access/{user_id}",
    response_model=JobAccessGrant,
    summary="Grant Job Access",
    description="Grant a member access to a job. Requires job:manage_access permission.",
)
async def grant_access(
    job_id: int = Path(..., description="Job ID"),
    user_id: int = Path(..., description="Member receiving access"),
    context: UserContext = Depends(require_permission(Permission.JOB_MANAGE_ACCESS)),
    db: AsyncSession = Depends(get_db),
):
    return await access_service.set_job_access(db, context, job_id, user_id, AccessType.GRANTED)


@router.delete(
    "/{job_id}/access/{user_id}",
    response_model=JobAccessGrant,
    summary="Revoke Job Access",
    description="Revoke a member's access to a job. Requires job:manage_access permission.",
)
async def revoke_access(
    job_id: int = Path(..., description="Job ID"),
    user_id: int = Path(..., description="Member losing access"),
    context: UserContext = Depends(require_permission(Permission.JOB_MANAGE_ACCESS)),
    db: AsyncSession = Depends(get_db),
):
    return await access_service.set_job_access(db, context, job_id, user_id, AccessType.REVOKED)
