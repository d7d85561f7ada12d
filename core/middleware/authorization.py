"""
Authorization: role-based permissions within an organization.

Roles:
1. admin - manages members and roles, full access to jobs and applications
2. hr    - full access to jobs and applications
3. ta    - talent acquisition, sees only the jobs it was granted

Authorization is done at the route level with dependencies built on top of
``get_user_context``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Set

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.engine import get_db
from database.models.organizations import Role, StaffRole, UserRole, primary_role
from database.models.users import UserProfile

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """System-wide permissions."""

    # Organization
    ORG_READ = "org:read"
    ORG_MANAGE_MEMBERS = "org:manage_members"

    # Jobs
    JOB_CREATE = "job:create"
    JOB_READ = "job:read"
    JOB_UPDATE = "job:update"
    JOB_DELETE = "job:delete"
    JOB_MANAGE_ACCESS = "job:manage_access"

    # Applications
    APPLICATION_READ = "application:read"
    APPLICATION_UPDATE = "application:update"

    # Reporting
    DASHBOARD_VIEW = "dashboard:view"


# Role to permission mapping
ROLE_PERMISSIONS: dict[StaffRole, Set[Permission]] = {
    StaffRole.ADMIN: set(Permission),
    StaffRole.HR: {
        Permission.ORG_READ,
        Permission.JOB_CREATE, Permission.JOB_READ, Permission.JOB_UPDATE,
        Permission.JOB_DELETE, Permission.JOB_MANAGE_ACCESS,
        Permission.APPLICATION_READ, Permission.APPLICATION_UPDATE,
        Permission.DASHBOARD_VIEW,
    },
    StaffRole.TA: {
        Permission.JOB_READ,
        Permission.APPLICATION_READ, Permission.APPLICATION_UPDATE,
        Permission.DASHBOARD_VIEW,
    },
}


class AuthorizationError(Exception):
    """Raised when user doesn't have required permissions."""
    code = "AUTHORIZATION_ERROR"


class OrganizationAccessDenied(AuthorizationError):
    """Raised when user doesn't belong to organization."""
    code = "ORGANIZATION_ACCESS_DENIED"


class InsufficientPermissions(AuthorizationError):
    """Raised when user lacks required permission."""
    code = "INSUFFICIENT_PERMISSIONS"


class JobAccessDenied(AuthorizationError):
    """Raised when a talent-acquisition user has no grant for a job."""
    code = "JOB_ACCESS_DENIED"


@dataclass
class UserContext:
    """Identity, tenant and roles of the caller."""
    user_id: int
    organization_id: Optional[int]
    email: str = ""
    roles: list[StaffRole] = field(default_factory=list)
    full_name: Optional[str] = None

    @property
    def has_full_access(self) -> bool:
        return StaffRole.ADMIN in self.roles or StaffRole.HR in self.roles

    @property
    def is_ta_only(self) -> bool:
        return StaffRole.TA in self.roles and not self.has_full_access

    @property
    def primary_role(self) -> Optional[StaffRole]:
        return primary_role(self.roles)

    @property
    def permissions(self) -> Set[Permission]:
        granted: Set[Permission] = set()
        for role in self.roles:
            granted |= ROLE_PERMISSIONS.get(role, set())
        return granted

    def require_organization(self) -> int:
        """Return the caller's organization id or raise OrganizationAccessDenied."""
        if self.organization_id is None:
            raise OrganizationAccessDenied("User is not a member of any organization")
        return self.organization_id


def check_permission(
    context: UserContext,
    required_permission: Permission,
    message: Optional[str] = None,
) -> None:
    """
    Check the caller holds ``required_permission`` through one of its roles.

    Raises:
        OrganizationAccessDenied: If user has no organization
        InsufficientPermissions: If user lacks permission
    """
    context.require_organization()
    if required_permission in context.permissions:
        return

    logger.warning(
        f"User {context.user_id} with roles {[r.value for r in context.roles]} lacks "
        f"permission {required_permission.value} in organization {context.organization_id}"
    )
    raise InsufficientPermissions(
        message or f"User does not have permission: {required_permission.value}"
    )


async def load_user_context(db: AsyncSession, user_id: int) -> UserContext:
    """
    Build the caller's context from its profile and active role assignments.

    Raises:
        HTTPException: 401 if the profile is gone, 403 if it is deactivated
    """
    result = await db.execute(select(UserProfile).where(UserProfile.id == user_id))
    profile = result.scalar_one_or_none()

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account not found",
        )
    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account",
        )

    roles: list[StaffRole] = []
    if profile.organization_id is not None:
        role_result = await db.execute(
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(
                UserRole.user_id == profile.id,
                UserRole.organization_id == profile.organization_id,
                UserRole.is_active.is_(True),
            )
        )
        roles = [StaffRole(name) for name in role_result.scalars().all()]

    return UserContext(
        user_id=profile.id,
        organization_id=profile.organization_id,
        email=profile.email,
        roles=roles,
        full_name=profile.full_name,
    )


async def get_user_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserContext:
    """
    Dependency returning the authenticated caller's context.

    The authentication middleware stores verified token claims in the
    request scope; requests without them are rejected.
    """
    payload = request.scope.get("jwt_payload")
    if not payload or "user_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    context = await load_user_context(db, int(payload["user_id"]))
    request.state.user_context = context
    return context


def require_permission(*required_permissions: Permission, message: Optional[str] = None) -> Callable:
    """
    Dependency to require specific permissions.

    Args:
        required_permissions: Required permissions
        message: Error message returned when a check fails

    Returns:
        FastAPI dependency yielding the caller's UserContext
    """
    async def dependency(
        context: UserContext = Depends(get_user_context),
    ) -> UserContext:
        for permission in required_permissions:
            check_permission(context, permission, message)
        return context

    return dependency


def require_roles(*allowed_roles: StaffRole, message: Optional[str] = None) -> Callable:
    """
    Dependency to require at least one of ``allowed_roles``.

    Args:
        allowed_roles: Roles that may call the endpoint
        message: Error message returned when the check fails

    Returns:
        FastAPI dependency yielding the caller's UserContext
    """
    async def dependency(
        context: UserContext = Depends(get_user_context),
    ) -> UserContext:
        context.require_organization()
        if not any(role in context.roles for role in allowed_roles):
            logger.warning(
                f"User {context.user_id} with roles {[r.value for r in context.roles]} "
                f"attempted action requiring roles: {[r.value for r in allowed_roles]}"
            )
            raise InsufficientPermissions(
                message
                or "Insufficient permissions. Required roles: "
                + ", ".join(r.value for r in allowed_roles)
            )
        return context

    return dependency
