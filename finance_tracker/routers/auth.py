"""
Session endpoints: sign-in, sign-up, logout, password reset, email
verification and profile updates.
"""
from typing import Optional

from fastapi import APIRouter, Depends, status

from ..models.api_responses import MessageResponse
from ..models.auth import (
    PasswordResetRequest,
    ProfileResponse,
    SessionResponse,
    SessionState,
    SignInRequest,
    SignUpRequest,
    UserProfileUpdate,
)
from ..services import SessionManager
from ..utils.dependencies import get_ready_session

router = APIRouter()


@router.get("/session", status_code=status.HTTP_200_OK, response_model=SessionResponse)
async def get_session(
    session: SessionManager = Depends(get_ready_session)
) -> SessionState:
    """Current identity and cached profile."""
    return session.state


@router.post("/sign-in", status_code=status.HTTP_200_OK, response_model=SessionResponse)
async def sign_in(
    request: SignInRequest,
    session: SessionManager = Depends(get_ready_session)
) -> SessionState:
    """
    Sign in with email/password.

    Accounts whose email is not verified yet are rejected with 403.
    """
    await session.sign_in(request.email, request.password)
    return session.state


@router.post("/sign-up", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
async def sign_up(
    request: SignUpRequest,
    session: SessionManager = Depends(get_ready_session)
) -> MessageResponse:
    """
    Register a new account.

    The account is left signed out; the user has to follow the verification
    email before signing in.
    """
    await session.sign_up(request.email, request.password, request.profile)
    return MessageResponse(
        message="Account created. Please verify your email before signing in.",
        detail=request.email
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    session: SessionManager = Depends(get_ready_session)
) -> None:
    """Sign out the current user."""
    await session.logout()


@router.post("/reset-password", status_code=status.HTTP_202_ACCEPTED, response_model=MessageResponse)
async def reset_password(
    request: PasswordResetRequest,
    session: SessionManager = Depends(get_ready_session)
) -> MessageResponse:
    """Send a password reset email."""
    await session.reset_password(request.email)
    return MessageResponse(message="Password reset email sent", detail=request.email)


@router.post("/verify-email", status_code=status.HTTP_202_ACCEPTED, response_model=MessageResponse)
async def verify_email(
    session: SessionManager = Depends(get_ready_session)
) -> MessageResponse:
    """Resend the verification email; nothing happens when already verified."""
    await session.verify_email()
    return MessageResponse(message="Verification email requested")


@router.patch("/profile", status_code=status.HTTP_200_OK, response_model=Optional[ProfileResponse])
async def update_profile(
    fields: UserProfileUpdate,
    session: SessionManager = Depends(get_ready_session)
):
    """Merge the given fields into the profile."""
    return await session.update_user_profile(fields)
