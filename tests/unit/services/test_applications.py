"""
Tests for application review.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from api.services.applications import (
    fetch_applications_with_access,
    get_application,
    parse_status,
    to_candidate_view,
    update_application_status,
)
from core.middleware.authorization import JobAccessDenied, UserContext
from core.middleware.error_handling import ResourceNotFound
from database.models.applications import ApplicationStatus
from database.models.jobs import JobType
from database.models.organizations import StaffRole


def ctx(*roles):
    return UserContext(user_id=1, organization_id=10, roles=list(roles))


def application(status=ApplicationStatus.PENDING):
    profile = SimpleNamespace(
        name="Asha Rao", candidate_email="asha@example.com", mobile_number="9876543210",
        address="Pune", gender="Female", disability=False, dob=date(1998, 2, 1),
        resume_link=None, portfolio_url=None, linkedin_url=None, additional_doc_link=None,
        current_ctc=800000.0, expected_ctc=1000000.0, notice_period="30 days",
        education=[SimpleNamespace(
            college_university="IIT Bombay", degree="B.Tech", field_of_study="CS",
            grade_percentage=82.5, is_current=False,
            start_date=date(2015, 7, 1), end_date=date(2019, 5, 1),
        )],
        experience=[SimpleNamespace(
            company_name="Initech", job_title="Engineer", job_type="Full Time",
            start_date=date(2019, 6, 1), end_date=None, currently_working=True,
        )],
    )
    job = SimpleNamespace(
        job_title="Backend Engineer", company_name="Acme",
        job_location="Bengaluru", job_type=JobType.FULL_TIME,
    )
    return SimpleNamespace(
        id=5, job_id=3, profile_id=8, application_status=status,
        applied_date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        updated_at=None, profile=profile, job=job,
    )


class TestParseStatus:

    @pytest.mark.parametrize("value,expected", [
        ("accepted", ApplicationStatus.ACCEPTED),
        ("Rejected", ApplicationStatus.REJECTED),
        (" PENDING ", ApplicationStatus.PENDING),
    ])
    def test_valid(self, value, expected):
        assert parse_status(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError) as exc_info:
            parse_status("hired")
        assert str(exc_info.value) == "Invalid status: hired. Must be one of: pending, accepted, rejected"


class TestCandidateView:

    def test_flattens_profile_and_job(self):
        view = to_candidate_view(application())

        assert view.application_id == 5
        assert view.name == "Asha Rao"
        assert view.job_title == "Backend Engineer"
        assert view.job_type == "Full Time"
        assert view.education[0].college_university == "IIT Bombay"
        assert view.experience[0].currently_working is True
        assert view.has_access is True


class TestFetchApplications:

    async def test_ta_without_grants_gets_nothing(self, make_result):
        session = AsyncMock()
        session.execute.return_value = make_result(items=[])

        assert await fetch_applications_with_access(session, ctx(StaffRole.TA)) == []
        session.execute.assert_awaited_once()

    async def test_returns_views(self, make_result):
        session = AsyncMock()
        session.execute.return_value = make_result(items=[application()])

        views = await fetch_applications_with_access(session, ctx(StaffRole.HR), status="pending")

        assert [v.application_id for v in views] == [5]

    async def test_invalid_status_filter(self):
        with pytest.raises(ValueError):
            await fetch_applications_with_access(AsyncMock(), ctx(StaffRole.HR), status="hired")


class TestUpdateStatus:

    async def test_updates_and_commits(self, make_result):
        session = AsyncMock()
        app = application()
        session.execute.return_value = make_result(scalar=app)

        result = await update_application_status(session, ctx(StaffRole.HR), 5, "Accepted")

        assert result["application_id"] == 5
        assert result["status"] == ApplicationStatus.ACCEPTED
        assert result["updated_at"] is not None
        assert app.application_status == ApplicationStatus.ACCEPTED
        session.commit.assert_awaited_once()

    async def test_invalid_status_rejected_before_lookup(self):
        session = AsyncMock()
        with pytest.raises(ValueError):
            await update_application_status(session, ctx(StaffRole.HR), 5, "shortlisted")
        session.execute.assert_not_awaited()

    async def test_ta_without_grant_denied(self, make_result):
        session = AsyncMock()
        session.execute.side_effect = [make_result(scalar=application()), make_result(scalar=None)]

        with pytest.raises(JobAccessDenied):
            await update_application_status(session, ctx(StaffRole.TA), 5, "rejected")
        session.commit.assert_not_awaited()

    async def test_unknown_application(self, make_result):
        session = AsyncMock()
        session.execute.return_value = make_result(scalar=None)

        with pytest.raises(ResourceNotFound, match="Application 9 not found"):
            await get_application(session, ctx(StaffRole.ADMIN), 9)
