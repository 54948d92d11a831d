from datetime import timedelta
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.logging_config import logger
from app.core.security import generate_secure_token
from app.core.tenant_context import TenantContext
from app.database import utcnow, as_utc
from app.services.email import EmailSender, email_sender
from app.services.identity import identity_manager


class PasswordResetService:
    """
    Issues and redeems single-use password reset tokens.

    Per user: no pending reset -> token issued (token, expiry) -> consumed or
    expired -> no pending reset. The raw token only leaves the system through
    the email sender.
    """

    def __init__(self, sender: EmailSender = email_sender):
        self.identity = identity_manager
        self.sender = sender

    def request_reset(self, db: Session, email: str) -> bool:
        """
        Issue a reset token for the user with this email and send it.

        Unknown emails are not an error: nothing changes and the caller
        reports the same generic message either way.

        Returns:
            True if a token was stored and dispatched
        """
        system = TenantContext.system()
        user = self.identity.find_by_email(db, email, system)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return False

        token = generate_secure_token(settings.PASSWORD_RESET_TOKEN_BYTES)
        self.identity.crud.update(
            db,
            db_obj=user,
            obj_in={
                "password_reset_token": token,
                "password_reset_token_expiry": utcnow()
                + timedelta(hours=settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS),
            },
            ctx=TenantContext(tenant_id=user.tenant_id),
        )

        try:
            self.sender.send_password_reset_email(user.email, token)
        except Exception:
            logger.exception(f"Failed to dispatch password reset email for user_id={user.id}")
            return False

        logger.info(f"Password reset token issued for user_id={user.id}")
        return True

    def reset_password(self, db: Session, token: str, new_password: str) -> bool:
        """
        Redeem a reset token and set a new password.

        The token is cleared with a conditional update (still matching, still
        unexpired) in the same transaction as the password change, so it can
        be redeemed at most once.

        Returns:
            False if the token is unknown, expired, already used, or the new
            password is rejected
        """
        if not token:
            return False

        system = TenantContext.system()
        user = self.identity.crud.get_by_reset_token(db, token, system)
        if user is None:
            logger.warning("Invalid password reset token provided")
            return False

        now = utcnow()
        expiry = as_utc(user.password_reset_token_expiry)
        if expiry is None or expiry < now:
            logger.warning(f"Expired password reset token used for user_id={user.id}")
            return False

        ctx = TenantContext(tenant_id=user.tenant_id)
        try:
            if not self.identity.crud.consume_reset_token(
                db, user_id=user.id, token=token, now=now, ctx=ctx
            ):
                db.rollback()
                logger.warning(f"Password reset token already consumed for user_id={user.id}")
                return False

            internal_token = self.identity.generate_password_reset_token(user)
            errors = self.identity.reset_password(
                db, user, internal_token, new_password, commit=False
            )
            if errors:
                db.rollback()
                logger.error(
                    f"Failed to reset password for user_id={user.id}. Errors: {', '.join(errors)}"
                )
                return False

            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Password successfully reset for user_id={user.id}")
        return True


# Create a singleton instance
password_reset_service = PasswordResetService()
