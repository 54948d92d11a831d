from abc import ABC, abstractmethod
from app.core.logging_config import logger


class EmailSender(ABC):
    """Out-of-band notification channel used by the password reset flow."""

    @abstractmethod
    def send_password_reset_email(self, email: str, reset_token: str) -> None:
        ...


class LoggingEmailSender(EmailSender):
    """
    Development sender that writes the message to the application log.

    Swap for a real provider (SMTP, SES, SendGrid) in production.
    """

    def send_password_reset_email(self, email: str, reset_token: str) -> None:
        logger.info("=================================================")
        logger.info("PASSWORD RESET EMAIL (Development Mode)")
        logger.info("=================================================")
        logger.info(f"To: {email}")
        logger.info("Subject: Reset Your Password")
        logger.info(f"Reset Token: {reset_token}")
        logger.info("To reset your password, call POST /api/auth/reset-password with:")
        logger.info(
            f'{{ "token": "{reset_token}", "newPassword": "YourNewPassword", '
            f'"confirmPassword": "YourNewPassword" }}'
        )
        logger.info("=================================================")


# Create a singleton instance
email_sender = LoggingEmailSender()
