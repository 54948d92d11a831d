from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_tenant_context, get_current_user
from app.core.exceptions import ValidationError
from app.core.tenant_context import TenantContext
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    UserInfoResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from app.schemas.common import MessageResponse
from app.services.auth import auth_service
from app.services.password_reset import password_reset_service

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."
INVALID_RESET_TOKEN = "Invalid or expired reset token."


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user and create their tenant (company).

    Returns:
        Access token, refresh token and user info

    Raises:
        409: If the email or company identifier is already taken
        400: If validation or the password policy fails
    """
    return auth_service.register(db, request)


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate with email and password.

    Raises:
        401: On bad credentials, locked account or inactive tenant
    """
    return auth_service.login(db, credentials.email, credentials.password)


@router.get("/me", response_model=UserInfoResponse)
def me(
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
    _user=Depends(get_current_user)
):
    """Current user and tenant info."""
    return auth_service.get_current_user_info(db, ctx)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Send a password reset token to the email, if it belongs to a user.

    The response is identical whether or not the account exists.
    """
    password_reset_service.request_reset(db, request.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    """
    Set a new password using a reset token.

    Raises:
        400: If the token is invalid, expired or already used
    """
    if not password_reset_service.reset_password(db, request.token, request.new_password):
        raise ValidationError(INVALID_RESET_TOKEN)
    return MessageResponse(message="Password has been reset successfully.")
