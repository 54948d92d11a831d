from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import update
from app.crud.base import CRUDBase
from app.core.audit import bind_actor
from app.core.exceptions import ConflictError
from app.core.tenant_context import TenantContext
from app.database import utcnow
from app.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().upper()


class CRUDUser(CRUDBase[User]):
    """
    CRUD operations for User model.

    Users are tenant-scoped: lookups made with a tenant context only see that
    tenant's users. Login and password reset run before a tenant is known and
    pass TenantContext.system().
    """

    def get_by_email(self, db: Session, email: str, ctx: TenantContext) -> Optional[User]:
        return self.get_by(db, ctx, User.normalized_email == normalize_email(email))

    def email_exists(self, db: Session, email: str, ctx: TenantContext) -> bool:
        return self.exists(db, ctx, User.normalized_email == normalize_email(email))

    def get_by_reset_token(self, db: Session, token: str, ctx: TenantContext) -> Optional[User]:
        return self.get_by(db, ctx, User.password_reset_token == token)

    def create(self, db: Session, *, obj_in, ctx: TenantContext, commit: bool = True) -> User:
        try:
            return super().create(db, obj_in=obj_in, ctx=ctx, commit=commit)
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email is already registered.")

    def consume_reset_token(
        self,
        db: Session,
        *,
        user_id: UUID,
        token: str,
        now: datetime,
        ctx: TenantContext
    ) -> bool:
        """
        Clear a reset token only if it still matches and has not expired.

        A single conditional UPDATE, so two concurrent redemptions of the same
        token cannot both succeed. Does not commit.

        Returns:
            True if exactly one row was cleared
        """
        bind_actor(db, ctx)
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.password_reset_token == token,
                User.password_reset_token_expiry.is_not(None),
                User.password_reset_token_expiry > now,
                User.is_deleted.is_(False),
            )
            .values(
                password_reset_token=None,
                password_reset_token_expiry=None,
                updated_at=utcnow(),
                updated_by=ctx.user_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        return result.rowcount == 1


# Create singleton instance
user = CRUDUser(
    User,
    updatable_fields=(
        "first_name",
        "last_name",
        "hashed_password",
        "security_stamp",
        "password_reset_token",
        "password_reset_token_expiry",
        "access_failed_count",
        "lockout_end",
    ),
)
