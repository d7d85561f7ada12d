"""Organization, membership and role endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import UserContext, get_db, get_user_context, require_member_manager, require_permission
from api.schemas.organizations import (
    AssignRoleRequest,
    MemberResponse,
    OrganizationResponse,
    RoleResponse,
)
from api.services import organizations as organization_service
from core.middleware.authorization import Permission
from database.models.organizations import StaffRole

router = APIRouter(prefix="/organization", tags=["organization"])


@router.get(
    "",
    response_model=OrganizationResponse,
    summary="Get Organization",
    description="The caller's organization.",
)
async def get_organization(
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    return await organization_service.get_organization(db, context.require_organization())


@router.get(
    "/members",
    response_model=list[MemberResponse],
    summary="List Members",
    description="Members with their current role. Requires org:read permission.",
)
async def list_members(
    role: Optional[StaffRole] = Query(None, description="Only members holding this role"),
    active_only: bool = Query(False, description="Only active members with an active role"),
    context: UserContext = Depends(require_permission(Permission.ORG_READ)),
    db: AsyncSession = Depends(get_db),
):
    members = await organization_service.fetch_org_members(db, context.organization_id)
    if active_only:
        members = organization_service.select_active_members(members)
    if role:
        members = organization_service.select_members_by_role(members, role)
    return members


@router.post(
    "/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign Role",
    description="Give a registered user a role in the organization. Admin only.",
)
async def assign_role(
    data: AssignRoleRequest,
    context: UserContext = Depends(require_member_manager),
    db: AsyncSession = Depends(get_db),
):
    return await organization_service.assign_user_role(
        db,
        target_email=data.email,
        organization_id=context.organization_id,
        role_name=data.role,
        assigner_id=context.user_id,
    )


@router.get(
    "/roles",
    response_model=list[RoleResponse],
    summary="List Roles",
    description="The role catalogue.",
)
async def list_roles(
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    return await organization_service.list_roles(db)
