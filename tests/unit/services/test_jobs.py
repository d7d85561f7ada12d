"""
Tests for job postings.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

import database.models  # noqa: F401
from api.schemas.jobs import JobCreate, JobUpdate, check_range
from api.services.jobs import create_job, delete_job, get_job, list_jobs, update_job
from core.middleware.authorization import JobAccessDenied, OrganizationAccessDenied, UserContext
from core.middleware.error_handling import ResourceNotFound
from database.models.jobs import Job, JobStatus
from database.models.organizations import StaffRole

JOB_PAYLOAD = {
    "company_name": " Acme ",
    "job_title": "Backend Engineer",
    "job_type": "Full Time",
    "job_location_type": "Hybrid",
    "job_location": "Bengaluru",
    "working_type": "Day",
    "job_description": "<p>Build APIs</p>",
    "min_experience_needed": 2,
    "max_experience_needed": 5,
    "min_salary": 1200000,
    "max_salary": 2000000,
}


def ctx(*roles):
    return UserContext(user_id=1, organization_id=10, roles=list(roles))


def stored_job(**overrides):
    values = dict(
        id=3, organization_id=10, job_title="Backend Engineer", company_name="Acme",
        min_experience_needed=2, max_experience_needed=5,
        min_salary=1200000.0, max_salary=2000000.0, status=JobStatus.ACTIVE,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


class TestJobSchemas:

    def test_check_range(self):
        assert check_range(1, 3, "salary") is None
        assert check_range(3, 3, "salary") is None
        assert check_range(None, 3, "salary") == "Both minimum and maximum salary are required"
        assert check_range(5, 3, "experience") == "Minimum experience cannot be greater than maximum"

    def test_create_defaults(self):
        job = JobCreate(**JOB_PAYLOAD)
        assert job.company_name == "Acme"
        assert job.status == JobStatus.ACTIVE
        assert job.requirements == []

    @pytest.mark.parametrize("overrides,message", [
        ({"min_salary": 3000000}, "Minimum salary cannot be greater than maximum"),
        ({"max_experience_needed": None}, "Both minimum and maximum experience are required"),
    ])
    def test_create_rejects_bad_ranges(self, overrides, message):
        with pytest.raises(ValidationError, match=message):
            JobCreate(**{**JOB_PAYLOAD, **overrides})

    def test_create_rejects_unknown_job_type(self):
        with pytest.raises(ValidationError):
            JobCreate(**{**JOB_PAYLOAD, "job_type": "Freelance"})

    @pytest.mark.parametrize("field", ["company_name", "job_title", "job_location", "job_description"])
    def test_create_rejects_blank_text(self, field):
        with pytest.raises(ValidationError):
            JobCreate(**{**JOB_PAYLOAD, field: "   "})

    def test_create_strips_description(self):
        assert JobCreate(**{**JOB_PAYLOAD, "job_description": " <p>x</p> "}).job_description == "<p>x</p>"

    @pytest.mark.parametrize("field", [
        "company_name", "job_title", "job_type", "job_location_type",
        "job_location", "working_type", "job_description", "status",
    ])
    def test_update_rejects_null_required(self, field):
        with pytest.raises(ValidationError, match=f"Fields cannot be null: {field}"):
            JobUpdate.model_validate({field: None})

    @pytest.mark.parametrize("field", ["company_name", "job_title", "job_description"])
    def test_update_rejects_blank_text(self, field):
        with pytest.raises(ValidationError):
            JobUpdate.model_validate({field: "  "})

    def test_update_allows_clearing_optional_fields(self):
        update = JobUpdate.model_validate({"application_deadline": None, "company_logo_url": None})
        assert update.model_dump(exclude_unset=True) == {
            "application_deadline": None,
            "company_logo_url": None,
        }


class TestListJobs:

    async def test_ta_without_grants(self, session, make_result):
        session.execute.return_value = make_result(items=[])
        assert await list_jobs(session, ctx(StaffRole.TA)) == {"jobs": [], "total": 0}
        session.execute.assert_awaited_once()

    async def test_returns_page_and_total(self, session, make_result):
        jobs = [stored_job(id=1), stored_job(id=2)]
        session.execute.side_effect = [make_result(scalar=7), make_result(items=jobs)]

        result = await list_jobs(session, ctx(StaffRole.HR), location="Beng", limit=2)

        assert result == {"jobs": jobs, "total": 7}

    async def test_requires_organization(self, session):
        context = UserContext(user_id=1, organization_id=None, roles=[])
        with pytest.raises(OrganizationAccessDenied):
            await list_jobs(session, context)


class TestGetJob:

    async def test_missing(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)
        with pytest.raises(ResourceNotFound, match="Job 3 not found"):
            await get_job(session, ctx(StaffRole.HR), 3)

    async def test_ta_without_grant(self, session, make_result):
        session.execute.side_effect = [make_result(scalar=stored_job()), make_result(scalar=None)]
        with pytest.raises(JobAccessDenied, match="You do not have access to this job"):
            await get_job(session, ctx(StaffRole.TA), 3)

    async def test_ta_with_grant(self, session, make_result):
        job = stored_job()
        session.execute.side_effect = [make_result(scalar=job), make_result(scalar=11)]
        assert await get_job(session, ctx(StaffRole.TA), 3) is job


class TestMutations:

    async def test_create(self, session):
        job = await create_job(session, ctx(StaffRole.HR), JobCreate(**JOB_PAYLOAD))

        assert isinstance(job, Job)
        assert job.organization_id == 10
        assert job.created_by == 1
        assert job.company_name == "Acme"
        session.add.assert_called_once_with(job)
        session.commit.assert_awaited_once()

    async def test_update_merges_with_stored_values(self, session, make_result):
        job = stored_job()
        session.execute.return_value = make_result(scalar=job)

        await update_job(session, ctx(StaffRole.HR), 3, JobUpdate(max_salary=2500000, status="paused"))

        assert job.max_salary == 2500000
        assert job.status == JobStatus.PAUSED
        assert job.min_salary == 1200000.0

    async def test_update_rejects_inverted_range(self, session, make_result):
        session.execute.return_value = make_result(scalar=stored_job())

        with pytest.raises(ValueError, match="Minimum experience cannot be greater than maximum"):
            await update_job(session, ctx(StaffRole.HR), 3, JobUpdate(min_experience_needed=8))
        session.commit.assert_not_awaited()

    async def test_update_strips_text(self, session, make_result):
        job = stored_job()
        session.execute.return_value = make_result(scalar=job)

        await update_job(session, ctx(StaffRole.HR), 3, JobUpdate(company_name="  Globex "))

        assert job.company_name == "Globex"
        assert job.job_title == "Backend Engineer"

    async def test_delete(self, session, make_result):
        job = stored_job()
        session.execute.return_value = make_result(scalar=job)

        await delete_job(session, ctx(StaffRole.ADMIN), 3)

        session.delete.assert_awaited_once_with(job)
        session.commit.assert_awaited_once()
