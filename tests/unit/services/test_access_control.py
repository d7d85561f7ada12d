"""
Tests for per-job access grants.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

import database.models  # noqa: F401
from api.services.access_control import (
    check_job_access,
    check_job_access_in_organization,
    list_job_access,
    set_job_access,
)
from core.middleware.authorization import UserContext
from core.middleware.error_handling import ResourceNotFound
from database.models.jobs import AccessType, JobAccessControl
from database.models.organizations import StaffRole


def ctx(*roles):
    return UserContext(user_id=1, organization_id=10, roles=list(roles))


@pytest.fixture
def session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


class TestCheckJobAccess:

    async def test_admin_and_hr_see_every_job(self, session):
        assert await check_job_access(session, ctx(StaffRole.ADMIN), 3) is True
        assert await check_job_access(session, ctx(StaffRole.HR), 3) is True
        session.execute.assert_not_awaited()

    async def test_ta_with_grant(self, session, make_result):
        session.execute.return_value = make_result(scalar=7)
        assert await check_job_access(session, ctx(StaffRole.TA), 3) is True

    async def test_ta_without_grant(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)
        assert await check_job_access(session, ctx(StaffRole.TA), 3) is False

    async def test_no_role_sees_nothing(self, session):
        assert await check_job_access(session, ctx(), 3) is False
        session.execute.assert_not_awaited()


class TestCheckJobAccessInOrganization:

    async def test_unknown_job_is_not_found_for_admin(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)
        with pytest.raises(ResourceNotFound, match="Job 99 not found"):
            await check_job_access_in_organization(session, ctx(StaffRole.ADMIN), 99)

    async def test_hr_on_own_job(self, session, make_result):
        session.execute.return_value = make_result(scalar=SimpleNamespace(id=3, organization_id=10))
        assert await check_job_access_in_organization(session, ctx(StaffRole.HR), 3) is True
        session.execute.assert_awaited_once()

    async def test_ta_on_own_job_without_grant(self, session, make_result):
        session.execute.side_effect = [
            make_result(scalar=SimpleNamespace(id=3, organization_id=10)),
            make_result(scalar=None),
        ]
        assert await check_job_access_in_organization(session, ctx(StaffRole.TA), 3) is False


class TestSetJobAccess:

    async def test_first_grant_creates_record(self, session, make_result):
        session.execute.side_effect = [
            make_result(scalar=SimpleNamespace(id=3)),  # job
            make_result(scalar=2),                       # target user
            make_result(scalar=None),                    # no existing record
        ]

        record = await set_job_access(session, ctx(StaffRole.HR), 3, 2, AccessType.GRANTED)

        assert isinstance(record, JobAccessControl)
        assert record.job_id == 3
        assert record.user_id == 2
        assert record.access_type == AccessType.GRANTED
        assert record.granted_by == 1
        session.add.assert_called_once_with(record)
        session.commit.assert_awaited_once()

    async def test_revoke_flips_existing_record(self, session, make_result):
        existing = SimpleNamespace(
            job_id=3, user_id=2, access_type=AccessType.GRANTED,
            granted_by=99, granted_at=None, updated_at=None,
        )
        session.execute.side_effect = [
            make_result(scalar=SimpleNamespace(id=3)),
            make_result(scalar=2),
            make_result(scalar=existing),
        ]

        record = await set_job_access(session, ctx(StaffRole.ADMIN), 3, 2, AccessType.REVOKED)

        assert record is existing
        assert record.access_type == AccessType.REVOKED
        assert record.granted_by == 99
        assert record.updated_at is not None
        session.add.assert_not_called()

    async def test_revoke_without_record(self, session, make_result):
        session.execute.side_effect = [
            make_result(scalar=SimpleNamespace(id=3)),
            make_result(scalar=2),
            make_result(scalar=None),
        ]
        with pytest.raises(ResourceNotFound, match="Access grant not found"):
            await set_job_access(session, ctx(StaffRole.HR), 3, 2, AccessType.REVOKED)
        session.commit.assert_not_awaited()

    async def test_user_outside_organization(self, session, make_result):
        session.execute.side_effect = [
            make_result(scalar=SimpleNamespace(id=3)),
            make_result(scalar=None),
        ]
        with pytest.raises(ResourceNotFound, match="User 2 not found"):
            await set_job_access(session, ctx(StaffRole.HR), 3, 2, AccessType.GRANTED)

    async def test_unknown_job(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)
        with pytest.raises(ResourceNotFound, match="Job 3 not found"):
            await list_job_access(session, ctx(StaffRole.HR), 3)
