"""
Authentication endpoints.

Registration and login are public; both hand back a bearer token.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import UserContext, get_db, get_user_context
from api.schemas.auth import (
    AuthResponse,
    CompleteUserData,
    LoginRequest,
    RegisterRequest,
)
from api.schemas.common import MessageResponse
from api.services import users as user_service
from core.security import token_response

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a staff account. The account joins an organization once an admin assigns it a role.",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.register_user(db, data)
    return {
        **token_response(user.id, user.email, user.organization_id),
        "user": await user_service.get_complete_user_data(db, user.id),
    }


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Exchange e-mail and password for an access token.",
)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.authenticate_user(db, data.email, data.password)
    return {
        **token_response(user.id, user.email, user.organization_id),
        "user": await user_service.get_complete_user_data(db, user.id),
    }


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Tokens are stateless; clients discard theirs.",
)
async def logout(context: UserContext = Depends(get_user_context)):
    return {"message": "Logged out successfully"}


@router.get(
    "/me",
    response_model=CompleteUserData,
    summary="Current User",
    description="Profile, organization and active roles of the caller.",
)
async def me(
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_complete_user_data(db, context.user_id)
