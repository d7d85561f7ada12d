"""Organization membership and role assignment."""

from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.middleware.error_handling import ConflictError, ResourceNotFound
from core.security import AuditAction, ResourceType, log_audit_event
from core.utils.datetime import now
from database.models.organizations import Organization, Role, StaffRole, UserRole
from database.models.users import UserProfile

logger = logging.getLogger(__name__)


async def get_organization(session: AsyncSession, organization_id: int) -> Organization:
    result = await session.execute(
        select(Organization).where(Organization.id == organization_id)
    )
    organization = result.scalar_one_or_none()
    if not organization:
        raise ResourceNotFound("Organization", organization_id)
    return organization


async def list_roles(session: AsyncSession) -> List[Role]:
    result = await session.execute(select(Role).order_by(Role.id))
    return list(result.scalars().all())


def build_member(profile: UserProfile, assignment: Optional[UserRole]) -> Dict[str, Any]:
    """
    Shape a profile and its role assignment into a member record.

    Profiles without an assignment are reported as TA with an inactive role.
    """
    is_role_active = bool(assignment and assignment.is_active)
    return {
        "id": profile.id,
        "name": profile.full_name or "Unknown",
        "email": profile.email,
        "role": assignment.role.name if assignment else StaffRole.TA,
        "assigned_by": assignment.assigned_by if assignment else None,
        "assigned_at": assignment.assigned_at if assignment else None,
        "is_member_active": profile.is_active,
        "is_role_active": is_role_active,
        "status": "active" if profile.is_active and is_role_active else "inactive",
    }


async def fetch_org_members(session: AsyncSession, organization_id: Optional[int]) -> List[Dict[str, Any]]:
    """
    Members of an organization with their current role.

    The active assignment wins; otherwise the most recent one is reported.
    """
    if not organization_id:
        raise ValueError("Organization ID is required")

    profiles_result = await session.execute(
        select(UserProfile)
        .where(UserProfile.organization_id == organization_id)
        .order_by(UserProfile.created_at)
    )
    profiles = profiles_result.scalars().all()

    assignments_result = await session.execute(
        select(UserRole)
        .where(UserRole.organization_id == organization_id)
        .order_by(UserRole.assigned_at.desc())
    )
    current: Dict[int, UserRole] = {}
    for assignment in assignments_result.scalars().all():
        held = current.get(assignment.user_id)
        if held is None or (assignment.is_active and not held.is_active):
            current[assignment.user_id] = assignment

    return [build_member(profile, current.get(profile.id)) for profile in profiles]


def select_active_members(members: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [m for m in members if m["status"] == "active"]


def select_members_by_role(members: Iterable[Dict[str, Any]], role: StaffRole) -> List[Dict[str, Any]]:
    return [m for m in members if m["role"] == role]


async def assign_user_role(
    session: AsyncSession,
    target_email: str,
    organization_id: int,
    role_name: str,
    assigner_id: int,
) -> Dict[str, Any]:
    """
    Give a registered user a role in an organization.

    Users without an organization join it; earlier active assignments in the
    organization are deactivated so exactly one stays active.

    Raises:
        ValueError: Missing parameter or unknown role
        ResourceNotFound: No account for ``target_email``
        ConflictError: The user belongs to another organization
    """
    if not (target_email and organization_id and role_name and assigner_id):
        raise ValueError("Email, organization, role and assigner are all required")

    try:
        role_value = StaffRole(str(getattr(role_name, "value", role_name)).lower())
    except ValueError:
        raise ValueError(f"Invalid role: {role_name}")

    user_result = await session.execute(
        select(UserProfile).where(UserProfile.email == target_email.strip().lower())
    )
    user = user_result.scalar_one_or_none()
    if not user:
        raise ResourceNotFound("User")

    if user.organization_id is not None and user.organization_id != organization_id:
        raise ConflictError("User already belongs to another organization")

    role_result = await session.execute(select(Role).where(Role.name == role_value))
    role = role_result.scalar_one_or_none()
    if not role:
        raise ResourceNotFound("Role", role_value.value)

    if user.organization_id is None:
        user.organization_id = organization_id

    await session.execute(
        update(UserRole)
        .where(
            UserRole.user_id == user.id,
            UserRole.organization_id == organization_id,
            UserRole.is_active.is_(True),
        )
        .values(is_active=False)
    )

    assignment = UserRole(
        user_id=user.id,
        role_id=role.id,
        role=role,
        organization_id=organization_id,
        assigned_by=assigner_id,
        assigned_at=now(),
        is_active=True,
    )
    session.add(assignment)
    await session.commit()

    log_audit_event(
        AuditAction.ASSIGN_ROLE,
        ResourceType.ORGANIZATION,
        resource_id=organization_id,
        user_id=assigner_id,
        organization_id=organization_id,
        details={"target_email": target_email, "role": role_value.value},
    )
    logger.info(f"User {user.id} assigned role {role_value.value} in organization {organization_id}")

    return build_member(user, assignment)
