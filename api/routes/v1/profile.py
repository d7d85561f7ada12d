"""Profile settings endpoints for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import UserContext, get_db, get_user_context
from api.schemas.auth import ProfileData
from api.schemas.common import MessageResponse
from api.schemas.profile import NotificationPreferences, PasswordChange, ProfileUpdate
from api.services import users as user_service

router = APIRouter(prefix="/profile", tags=["profile"])


@router.patch(
    "",
    response_model=ProfileData,
    summary="Update Profile",
    description="Update name and phone number.",
)
async def update_profile(
    data: ProfileUpdate,
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_profile(
        db, context.user_id, data.model_dump(exclude_unset=True)
    )


@router.post(
    "/password",
    response_model=MessageResponse,
    summary="Change Password",
    description="Requires the current password. The new one must meet four of the five strength rules.",
)
async def change_password(
    data: PasswordChange,
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(
        db, context.user_id, data.current_password, data.new_password
    )
    return {"message": "Password updated successfully"}


@router.get(
    "/notifications",
    response_model=NotificationPreferences,
    summary="Get Notification Preferences",
)
async def get_notifications(
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_notification_preferences(db, context.user_id)


@router.put(
    "/notifications",
    response_model=NotificationPreferences,
    summary="Update Notification Preferences",
)
async def update_notifications(
    preferences: NotificationPreferences,
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_notification_preferences(db, context.user_id, preferences)
