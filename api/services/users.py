"""Staff account service functions: registration, login and profile settings."""

from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import RegisterRequest
from api.schemas.profile import NotificationPreferences
from core.middleware.error_handling import ConflictError, ResourceNotFound
from core.security import AuditAction, ResourceType, hash_password, log_audit_event, verify_password
from core.utils.datetime import now
from core.utils.validators import is_strong_password, password_strength, validate_email, validate_phone
from database.models.organizations import Organization, UserRole
from database.models.users import DEFAULT_NOTIFICATION_PREFERENCES, UserProfile

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists. Please login instead."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[UserProfile]:
    result = await session.execute(
        select(UserProfile).where(UserProfile.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def _get_user(session: AsyncSession, user_id: int) -> UserProfile:
    result = await session.execute(select(UserProfile).where(UserProfile.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFound("User", user_id)
    return user


async def register_user(session: AsyncSession, data: RegisterRequest) -> UserProfile:
    """
    Create an active staff profile without organization or roles.

    Raises:
        ValueError: Invalid e-mail or phone number
        ConflictError: E-mail already registered
    """
    ok, email_or_error = validate_email(data.email)
    if not ok:
        raise ValueError(email_or_error)
    ok, phone_error = validate_phone(data.phone)
    if not ok:
        raise ValueError(phone_error)

    if await get_user_by_email(session, email_or_error):
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    user = UserProfile(
        email=email_or_error,
        full_name=data.name,
        phone=data.phone,
        password_hash=hash_password(data.password),
        is_active=True,
        notification_preferences=dict(DEFAULT_NOTIFICATION_PREFERENCES),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    log_audit_event(AuditAction.CREATE, ResourceType.USER, resource_id=user.id, user_id=user.id)
    logger.info(f"Registered user {user.id}")
    return user


async def authenticate_user(session: AsyncSession, email: str, password: str) -> UserProfile:
    """
    Check credentials and stamp ``last_login``.

    Raises:
        HTTPException: 401 on bad credentials, 403 for deactivated accounts
    """
    user = await get_user_by_email(session, email)

    if not user or not verify_password(password, user.password_hash):
        log_audit_event(
            AuditAction.LOGIN_FAILED,
            ResourceType.USER,
            user_id=user.id if user else None,
            details={"email": email},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS_MESSAGE,
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been deactivated",
        )

    user.last_login = now()
    await session.commit()

    log_audit_event(
        AuditAction.LOGIN,
        ResourceType.USER,
        resource_id=user.id,
        user_id=user.id,
        organization_id=user.organization_id,
    )
    return user


async def get_complete_user_data(session: AsyncSession, user_id: int) -> Dict[str, Any]:
    """Profile, organization and active role assignments of a user."""
    user = await _get_user(session, user_id)

    organization = None
    roles = []
    if user.organization_id is not None:
        org_result = await session.execute(
            select(Organization).where(Organization.id == user.organization_id)
        )
        organization = org_result.scalar_one_or_none()

        role_result = await session.execute(
            select(UserRole).where(
                UserRole.user_id == user.id,
                UserRole.organization_id == user.organization_id,
                UserRole.is_active.is_(True),
            )
        )
        for assignment in role_result.scalars().all():
            roles.append({
                "role": assignment.role.name,
                "display_name": assignment.role.display_name,
                "organization_id": assignment.organization_id,
                "assigned_at": assignment.assigned_at,
            })

    return {
        "profile": user,
        "organization": organization,
        "roles": roles,
    }


async def update_profile(session: AsyncSession, user_id: int, updates: Dict[str, Any]) -> UserProfile:
    """Update the editable profile fields (``full_name`` and ``phone``)."""
    user = await _get_user(session, user_id)

    if updates.get("phone") is not None:
        ok, error = validate_phone(updates["phone"])
        if not ok:
            raise ValueError(error)

    for field in ("full_name", "phone"):
        if updates.get(field) is not None:
            setattr(user, field, updates[field])

    await session.commit()
    await session.refresh(user)
    log_audit_event(
        AuditAction.UPDATE,
        ResourceType.USER,
        resource_id=user.id,
        user_id=user.id,
        details={"fields": sorted(k for k, v in updates.items() if v is not None)},
    )
    return user


async def change_password(
    session: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> None:
    """
    Replace the password after checking the current one.

    Raises:
        ValueError: Wrong current password, weak or unchanged new password
    """
    user = await _get_user(session, user_id)

    if not verify_password(current_password, user.password_hash):
        raise ValueError("Current password is incorrect")

    if not is_strong_password(new_password):
        _, feedback = password_strength(new_password)
        raise ValueError("Password is too weak. " + " ".join(feedback))

    if current_password == new_password:
        raise ValueError("New password must be different from the current password")

    user.password_hash = hash_password(new_password)
    await session.commit()

    log_audit_event(AuditAction.PASSWORD_CHANGE, ResourceType.USER, resource_id=user.id, user_id=user.id)
    logger.info(f"Password changed for user {user.id}")


async def get_notification_preferences(session: AsyncSession, user_id: int) -> NotificationPreferences:
    user = await _get_user(session, user_id)
    stored = user.notification_preferences or {}
    return NotificationPreferences(**{**DEFAULT_NOTIFICATION_PREFERENCES, **stored})


async def update_notification_preferences(
    session: AsyncSession,
    user_id: int,
    preferences: NotificationPreferences,
) -> NotificationPreferences:
    user = await _get_user(session, user_id)
    # Reassign so the JSON column is flagged dirty
    user.notification_preferences = preferences.model_dump()
    await session.commit()
    return preferences
