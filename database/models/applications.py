from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.candidates import CandidateProfile
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    ForeignKey,
    BigInteger,
    DateTime,
    func,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base
from database.security import audit_changes
from datetime import datetime
from enum import Enum as PyEnum


# ==================== Enums ===================== #
class ApplicationStatus(str, PyEnum):
    """
    Review outcome of an application.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ==================== Job Application ===================== #
@audit_changes
class JobApplication(Base):
    """
    A candidate's submission against one job posting.
    """

    __tablename__: str = "job_applications"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    profile_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("candidate_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    application_status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=50),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    applied_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
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
    job: Mapped["Job"] = relationship("Job", back_populates="applications")
    profile: Mapped["CandidateProfile"] = relationship(
        "CandidateProfile", back_populates="applications"
    )

    __table_args__ = (
        UniqueConstraint("job_id", "profile_id", name="uq_application_job_profile"),
        Index("idx_application_job_status", "job_id", "application_status"),
        Index("idx_application_applied_date", "applied_date"),
    )
