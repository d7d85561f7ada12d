"""
ORM models. Importing this package registers every mapper so that
string-based relationships resolve.
"""

from database.models.organizations import Organization, Role, StaffRole, UserRole
from database.models.users import UserProfile
from database.models.jobs import (
    AccessType,
    Job,
    JobAccessControl,
    JobLocationType,
    JobStatus,
    JobType,
    WorkingType,
)
from database.models.candidates import CandidateProfile, Education, Experience
from database.models.applications import ApplicationStatus, JobApplication

__all__ = [
    "Organization",
    "Role",
    "StaffRole",
    "UserRole",
    "UserProfile",
    "AccessType",
    "Job",
    "JobAccessControl",
    "JobLocationType",
    "JobStatus",
    "JobType",
    "WorkingType",
    "CandidateProfile",
    "Education",
    "Experience",
    "ApplicationStatus",
    "JobApplication",
]
