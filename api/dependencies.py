"""FastAPI dependencies for dependency injection."""

from fastapi import Query

from api.schemas.common import PaginationParams
from core.config import settings
from core.middleware.authorization import (
    Permission,
    UserContext,
    get_user_context,
    require_permission,
    require_roles,
)
from database.engine import get_db
from database.models.organizations import StaffRole


JOB_EDIT_DENIED = "You do not have permission to edit this job."

# Gates shared by several routers
require_job_create = require_permission(Permission.JOB_CREATE, message=JOB_EDIT_DENIED)
require_job_update = require_permission(Permission.JOB_UPDATE, message=JOB_EDIT_DENIED)
require_job_delete = require_permission(Permission.JOB_DELETE, message=JOB_EDIT_DENIED)
require_member_manager = require_permission(
    Permission.ORG_MANAGE_MEMBERS,
    message="Only organization admins can manage members and roles.",
)
require_staff = require_roles(StaffRole.ADMIN, StaffRole.HR, StaffRole.TA)


async def get_job_pagination(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(settings.jobs_page_size, ge=1, le=100, description="Jobs per page"),
) -> PaginationParams:
    """Pagination for the jobs listing."""
    return PaginationParams(page=page, page_size=page_size)


__all__ = [
    "UserContext",
    "get_db",
    "get_user_context",
    "get_job_pagination",
    "require_permission",
    "require_job_create",
    "require_job_update",
    "require_job_delete",
    "require_member_manager",
    "require_staff",
]
