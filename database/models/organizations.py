from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import UserProfile
    from database.models.jobs import Job
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    BigInteger,
    DateTime,
    Text,
    func,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base
from datetime import datetime
from enum import Enum as PyEnum
from database.security import audit_changes


# ==================== Enums ===================== #
class StaffRole(str, PyEnum):
    """
    Roles a staff member can hold within an organization.
    """

    ADMIN = "admin"  # manages members, roles and every job
    HR = "hr"  # full access to jobs and applications
    TA = "ta"  # talent acquisition, limited to granted jobs


# Order used when a user holds several roles and one must be reported
ROLE_PRECEDENCE: tuple[StaffRole, ...] = (StaffRole.ADMIN, StaffRole.HR, StaffRole.TA)


def primary_role(roles: list[StaffRole]) -> StaffRole | None:
    """Return the most privileged role in ``roles``."""
    for role in ROLE_PRECEDENCE:
        if role in roles:
            return role
    return None


@audit_changes
class Organization(Base):
    """
    Tenant boundary grouping users, jobs and roles.
    """

    __tablename__: str = "organizations"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    members: Mapped[list["UserProfile"]] = relationship(
        "UserProfile", back_populates="organization"
    )
    jobs: Mapped[list["Job"]] = relationship(
        "Job", back_populates="organization", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_organization_slug", "slug"),)


class Role(Base):
    """
    Catalogue of assignable roles.
    """

    __tablename__: str = "roles"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    name: Mapped[StaffRole] = mapped_column(
        SQLEnum(StaffRole, native_enum=False, length=50),
        unique=True,
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


@audit_changes
class UserRole(Base):
    """
    Assignment of a role to a user inside one organization.
    Only one assignment per (user, organization) is active at a time.
    """

    __tablename__: str = "user_roles"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("roles.id"), nullable=False
    )
    organization_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    assigned_by: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    role: Mapped["Role"] = relationship("Role", lazy="joined")
    user: Mapped["UserProfile"] = relationship(
        "UserProfile", foreign_keys=[user_id], back_populates="role_assignments"
    )

    __table_args__ = (
        Index("idx_user_roles_user_org", "user_id", "organization_id", "is_active"),
    )
