import enum
import uuid
from datetime import timedelta
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import ValidationError, ConflictError
from app.core.logging_config import logger
from app.core.security import (
    get_password_hash,
    verify_password,
    create_purpose_token,
    verify_purpose_token,
)
from app.core.tenant_context import TenantContext
from app.crud.user import user as user_crud, normalize_email
from app.database import utcnow, as_utc
from app.models.user import User

RESET_PASSWORD_PURPOSE = "reset_password"


class SignInResult(str, enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    LOCKED_OUT = "locked_out"


def _new_security_stamp() -> str:
    return uuid.uuid4().hex


class IdentityManager:
    """
    User credential management: password policy, hashing, lockout and the
    internal password reset token.

    Callers never touch hashed_password or the lockout columns directly.
    """

    def __init__(self):
        self.crud = user_crud

    def validate_password(self, password: str) -> List[str]:
        """
        Check a password against the policy.

        Returns:
            List of human readable violations, empty if the password is valid
        """
        errors = []
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            errors.append(f"Passwords must be at least {settings.PASSWORD_MIN_LENGTH} characters.")
        if len(password.encode("utf-8")) > 72:
            errors.append("Passwords must be at most 72 bytes.")
        if not any(c.isdigit() for c in password):
            errors.append("Passwords must have at least one digit ('0'-'9').")
        if not any(c.islower() for c in password):
            errors.append("Passwords must have at least one lowercase ('a'-'z').")
        if not any(c.isupper() for c in password):
            errors.append("Passwords must have at least one uppercase ('A'-'Z').")
        if all(c.isalnum() for c in password):
            errors.append("Passwords must have at least one non alphanumeric character.")
        return errors

    def find_by_email(self, db: Session, email: str, ctx: TenantContext) -> Optional[User]:
        return self.crud.get_by_email(db, email, ctx)

    def create_user(
        self,
        db: Session,
        ctx: TenantContext,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        tenant_id: UUID,
        commit: bool = True
    ) -> User:
        """
        Create a user with a hashed password.

        Raises:
            ValidationError: If the password violates the policy
            ConflictError: If the email is already registered
        """
        errors = self.validate_password(password)
        if errors:
            raise ValidationError("Registration failed.", errors=errors)

        # Email uniqueness is global, not per tenant
        if self.crud.email_exists(db, email, TenantContext.system()):
            raise ConflictError("Email is already registered.")

        return self.crud.create(
            db,
            obj_in={
                "email": email,
                "normalized_email": normalize_email(email),
                "hashed_password": get_password_hash(password),
                "first_name": first_name,
                "last_name": last_name,
                "tenant_id": tenant_id,
                "security_stamp": _new_security_stamp(),
                "access_failed_count": 0,
                "lockout_enabled": True,
            },
            ctx=ctx,
            commit=commit,
        )

    def is_locked_out(self, user: User) -> bool:
        lockout_end = as_utc(user.lockout_end)
        return bool(user.lockout_enabled and lockout_end and lockout_end > utcnow())

    def check_password_sign_in(
        self,
        db: Session,
        user: User,
        password: str,
        lockout_on_failure: bool = True
    ) -> SignInResult:
        """
        Verify a password and apply the lockout policy.

        A locked-out user is rejected without checking the password. Each
        failure counts towards LOCKOUT_MAX_FAILED_ATTEMPTS; reaching it locks
        the account for LOCKOUT_MINUTES and the attempt reports LOCKED_OUT.
        """
        if self.is_locked_out(user):
            return SignInResult.LOCKED_OUT

        # Sign-in happens before authentication, so there is no acting user
        ctx = TenantContext(tenant_id=user.tenant_id)

        if verify_password(password, user.hashed_password):
            if user.access_failed_count or user.lockout_end is not None:
                self.crud.update(
                    db, db_obj=user, obj_in={"access_failed_count": 0, "lockout_end": None}, ctx=ctx
                )
            return SignInResult.SUCCESS

        if not (lockout_on_failure and user.lockout_enabled):
            return SignInResult.FAILED

        failed = (user.access_failed_count or 0) + 1
        if failed >= settings.LOCKOUT_MAX_FAILED_ATTEMPTS:
            self.crud.update(
                db,
                db_obj=user,
                obj_in={
                    "access_failed_count": 0,
                    "lockout_end": utcnow() + timedelta(minutes=settings.LOCKOUT_MINUTES),
                },
                ctx=ctx,
            )
            logger.warning(f"User {user.id} locked out after {failed} failed sign-in attempts")
            return SignInResult.LOCKED_OUT

        self.crud.update(db, db_obj=user, obj_in={"access_failed_count": failed}, ctx=ctx)
        return SignInResult.FAILED

    def generate_password_reset_token(self, user: User) -> str:
        """Internal reset token, invalidated by any credential change."""
        return create_purpose_token(
            subject=str(user.id),
            purpose=RESET_PASSWORD_PURPOSE,
            stamp=user.security_stamp,
            expires_delta=timedelta(minutes=settings.IDENTITY_RESET_TOKEN_EXPIRE_MINUTES),
        )

    def reset_password(
        self,
        db: Session,
        user: User,
        token: str,
        new_password: str,
        commit: bool = True
    ) -> List[str]:
        """
        Change the password using a token from generate_password_reset_token().

        Returns:
            List of errors, empty on success
        """
        if not verify_purpose_token(token, str(user.id), RESET_PASSWORD_PURPOSE, user.security_stamp):
            return ["Invalid token."]

        errors = self.validate_password(new_password)
        if errors:
            return errors

        self.crud.update(
            db,
            db_obj=user,
            obj_in={
                "hashed_password": get_password_hash(new_password),
                "security_stamp": _new_security_stamp(),
                "access_failed_count": 0,
                "lockout_end": None,
            },
            ctx=TenantContext(tenant_id=user.tenant_id, user_id=user.id),
            commit=commit,
        )
        return []


# Create a singleton instance
identity_manager = IdentityManager()
