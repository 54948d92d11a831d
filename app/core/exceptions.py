"""
Domain exceptions raised by the service layer.

main.py maps each class to an HTTP status; services never raise HTTPException.
"""
from enum import Enum
from typing import List, Optional
from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or missing input, including password policy failures."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "validation_error"

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class ConflictError(AppError):
    """Uniqueness violation."""
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class AuthReason(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    LOCKED_OUT = "locked_out"
    INACTIVE_TENANT = "inactive_tenant"
    UNAUTHENTICATED = "unauthenticated"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "authentication_error"

    def __init__(self, message: str, reason: AuthReason = AuthReason.UNAUTHENTICATED):
        super().__init__(message)
        self.reason = reason
