from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.organizations import Organization
    from database.models.applications import JobApplication
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Integer,
    Float,
    ForeignKey,
    BigInteger,
    DateTime,
    Date,
    Text,
    func,
    JSON,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base
from database.security import audit_changes
from datetime import date, datetime
from enum import Enum as PyEnum


# ==================== Enums ===================== #
class JobType(str, PyEnum):
    FULL_TIME = "Full Time"
    PART_TIME = "Part Time"
    INTERNSHIP = "Internship"
    CONTRACT = "Contract"


class JobLocationType(str, PyEnum):
    ON_SITE = "On-site"
    REMOTE = "Remote"
    HYBRID = "Hybrid"


class WorkingType(str, PyEnum):
    DAY = "Day"
    NIGHT = "Night"
    FLEXIBLE = "Flexible"


class JobStatus(str, PyEnum):
    ACTIVE = "active"  # accepting applications
    PAUSED = "paused"  # temporarily hidden
    CLOSED = "closed"  # no longer hiring


class AccessType(str, PyEnum):
    """Outcome of a per-job access decision for a talent-acquisition user."""

    GRANTED = "granted"
    REVOKED = "revoked"


# ==================== Job ===================== #
@audit_changes
class Job(Base):
    """
    Job posting owned by an organization.
    """

    __tablename__: str = "jobs"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    organization_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True
    )

    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_logo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    job_title: Mapped[str] = mapped_column(String(255), nullable=False)
    job_type: Mapped[JobType] = mapped_column(
        SQLEnum(JobType, native_enum=False, length=50), nullable=False
    )
    job_location_type: Mapped[JobLocationType] = mapped_column(
        SQLEnum(JobLocationType, native_enum=False, length=50), nullable=False
    )
    job_location: Mapped[str] = mapped_column(String(255), nullable=False)
    working_type: Mapped[WorkingType] = mapped_column(
        SQLEnum(WorkingType, native_enum=False, length=50), nullable=False
    )
    min_experience_needed: Mapped[int] = mapped_column(Integer, nullable=False)
    max_experience_needed: Mapped[int] = mapped_column(Integer, nullable=False)
    min_salary: Mapped[float] = mapped_column(Float, nullable=False)
    max_salary: Mapped[float] = mapped_column(Float, nullable=False)
    # Rendered HTML from the rich-text editor, stored verbatim
    job_description: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    benefits: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    application_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus, native_enum=False, length=50),
        nullable=False,
        default=JobStatus.ACTIVE,
    )

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
    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="jobs"
    )
    applications: Mapped[list["JobApplication"]] = relationship(
        "JobApplication", back_populates="job", cascade="all, delete-orphan"
    )
    access_grants: Mapped[list["JobAccessControl"]] = relationship(
        "JobAccessControl", back_populates="job", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_job_org_status", "organization_id", "status"),
        Index("idx_job_org_created", "organization_id", "created_at"),
    )


# ==================== Access Control ===================== #
@audit_changes
class JobAccessControl(Base):
    """
    Per-job visibility record for talent-acquisition users.
    Revocation keeps the row with access_type=revoked.
    """

    __tablename__: str = "job_access_control"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False
    )
    access_type: Mapped[AccessType] = mapped_column(
        SQLEnum(AccessType, native_enum=False, length=50),
        nullable=False,
        default=AccessType.GRANTED,
    )
    granted_by: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True
    )
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    job: Mapped["Job"] = relationship("Job", back_populates="access_grants")

    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_job_access_job_user"),
        Index("idx_job_access_user_type", "user_id", "access_type"),
    )
