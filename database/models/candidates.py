from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.applications import JobApplication
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    Float,
    ForeignKey,
    BigInteger,
    DateTime,
    Date,
    func,
)
from database.engine import Base
from database.security import audit_changes
from datetime import date, datetime


# ==================== Candidate Profile ===================== #
@audit_changes
class CandidateProfile(Base):
    """
    Applicant record. Candidates apply from the public careers site,
    staff only read and triage these rows.
    """

    __tablename__: str = "candidate_profiles"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    auth_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    candidate_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    mobile_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(30), nullable=True)
    disability: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    resume_link: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    portfolio_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    additional_doc_link: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    current_ctc: Mapped[float | None] = mapped_column(Float, nullable=True)
    expected_ctc: Mapped[float | None] = mapped_column(Float, nullable=True)
    notice_period: Mapped[str | None] = mapped_column(String(50), nullable=True)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
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
    education: Mapped[list["Education"]] = relationship(
        "Education", back_populates="profile", cascade="all, delete-orphan"
    )
    experience: Mapped[list["Experience"]] = relationship(
        "Experience", back_populates="profile", cascade="all, delete-orphan"
    )
    applications: Mapped[list["JobApplication"]] = relationship(
        "JobApplication", back_populates="profile", cascade="all, delete-orphan"
    )


class Education(Base):
    __tablename__: str = "education"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    profile_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("candidate_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    college_university: Mapped[str] = mapped_column(String(255), nullable=False)
    degree: Mapped[str | None] = mapped_column(String(255), nullable=True)
    field_of_study: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grade_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    profile: Mapped["CandidateProfile"] = relationship(
        "CandidateProfile", back_populates="education"
    )


class Experience(Base):
    __tablename__: str = "experience"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    profile_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("candidate_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    job_title: Mapped[str] = mapped_column(String(255), nullable=False)
    job_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    currently_working: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    profile: Mapped["CandidateProfile"] = relationship(
        "CandidateProfile", back_populates="experience"
    )
