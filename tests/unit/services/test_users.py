"""
Tests for staff accounts: registration, login, password and preferences.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

import database.models  # noqa: F401
from api.schemas.auth import RegisterRequest
from api.schemas.profile import NotificationPreferences
from api.services.users import (
    DUPLICATE_EMAIL_MESSAGE,
    authenticate_user,
    change_password,
    get_notification_preferences,
    register_user,
    update_notification_preferences,
    update_profile,
)
from core.middleware.error_handling import ConflictError, ResourceNotFound
from core.security import hash_password, verify_password
from database.models.users import UserProfile

PASSWORD = "Str0ng!Pass"


@pytest.fixture
def session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def user():
    return SimpleNamespace(
        id=1,
        email="hana@acme.com",
        full_name="Hana",
        phone="9876543210",
        password_hash=hash_password(PASSWORD),
        is_active=True,
        organization_id=10,
        last_login=None,
        notification_preferences={"product_updates": True},
    )


class TestRegister:

    def registration(self, **overrides):
        data = {
            "name": "  Hana Mori ",
            "email": "Hana@Acme.com",
            "password": "secret1",
            "phone": "9876543210",
        }
        data.update(overrides)
        return RegisterRequest(**data)

    async def test_creates_active_profile(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)

        created = await register_user(session, self.registration())

        assert isinstance(created, UserProfile)
        assert created.email == "hana@acme.com"
        assert created.full_name == "Hana Mori"
        assert created.is_active is True
        assert created.organization_id is None
        assert verify_password("secret1", created.password_hash)
        assert created.notification_preferences["applications"] is True
        session.add.assert_called_once_with(created)
        session.commit.assert_awaited_once()

    async def test_duplicate_email(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)

        with pytest.raises(ConflictError) as exc_info:
            await register_user(session, self.registration())
        assert str(exc_info.value) == DUPLICATE_EMAIL_MESSAGE
        session.add.assert_not_called()

    async def test_phone_with_letters(self, session):
        with pytest.raises(ValueError):
            await register_user(session, self.registration(phone="98765abc10"))


class TestAuthenticate:

    async def test_success_stamps_last_login(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)

        result = await authenticate_user(session, "hana@acme.com", PASSWORD)

        assert result is user
        assert user.last_login is not None
        session.commit.assert_awaited_once()

    async def test_wrong_password(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)

        with pytest.raises(HTTPException) as exc_info:
            await authenticate_user(session, "hana@acme.com", "nope")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid email or password"

    async def test_unknown_email_same_error(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)

        with pytest.raises(HTTPException) as exc_info:
            await authenticate_user(session, "ghost@acme.com", PASSWORD)
        assert exc_info.value.status_code == 401

    async def test_deactivated(self, session, make_result, user):
        user.is_active = False
        session.execute.return_value = make_result(scalar=user)

        with pytest.raises(HTTPException) as exc_info:
            await authenticate_user(session, "hana@acme.com", PASSWORD)
        assert exc_info.value.status_code == 403


class TestProfileSettings:

    async def test_update_profile(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)

        await update_profile(session, 1, {"full_name": "Hana M.", "phone": None})

        assert user.full_name == "Hana M."
        assert user.phone == "9876543210"

    async def test_unknown_user(self, session, make_result):
        session.execute.return_value = make_result(scalar=None)
        with pytest.raises(ResourceNotFound):
            await update_profile(session, 99, {"full_name": "X"})

    async def test_change_password(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)

        await change_password(session, 1, PASSWORD, "N3w!Password")

        assert verify_password("N3w!Password", user.password_hash)
        session.commit.assert_awaited_once()

    @pytest.mark.parametrize("current,new,message", [
        ("wrong", "N3w!Password", "Current password is incorrect"),
        (PASSWORD, "weakpass", "Password is too weak"),
        (PASSWORD, PASSWORD, "New password must be different"),
    ])
    async def test_change_password_rejected(self, session, make_result, user, current, new, message):
        session.execute.return_value = make_result(scalar=user)

        with pytest.raises(ValueError, match=message):
            await change_password(session, 1, current, new)
        session.commit.assert_not_awaited()

    async def test_preferences_merge_defaults(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)

        prefs = await get_notification_preferences(session, 1)

        assert prefs.applications is True
        assert prefs.product_updates is True
        assert prefs.community_events is False

    async def test_update_preferences(self, session, make_result, user):
        session.execute.return_value = make_result(scalar=user)
        prefs = NotificationPreferences(applications=False, weekly_summary=False)

        await update_notification_preferences(session, 1, prefs)

        assert user.notification_preferences["applications"] is False
        assert len(user.notification_preferences) == 6
