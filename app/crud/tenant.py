from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from app.crud.base import CRUDBase
from app.core.exceptions import ConflictError
from app.core.tenant_context import TenantContext
from app.models.tenant import Tenant


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


class CRUDTenant(CRUDBase[Tenant]):
    """
    CRUD operations for Tenant model.

    Tenant is not tenant-scoped itself (platform callers manage all tenants),
    so only the soft-delete filter applies.
    """

    def get_by_identifier(self, db: Session, identifier: str, ctx: TenantContext) -> Optional[Tenant]:
        return self.get_by(db, ctx, Tenant.identifier == normalize_identifier(identifier))

    def get_by_name(self, db: Session, name: str, ctx: TenantContext) -> Optional[Tenant]:
        return self.get_by(db, ctx, Tenant.name == name)

    def identifier_exists(self, db: Session, identifier: str, ctx: TenantContext) -> bool:
        return self.exists(db, ctx, Tenant.identifier == normalize_identifier(identifier))

    def create(self, db: Session, *, obj_in, ctx: TenantContext, commit: bool = True) -> Tenant:
        """
        Create a tenant, mapping a unique-index collision to ConflictError.

        The index also covers soft-deleted rows, which identifier_exists()
        does not see.
        """
        try:
            return super().create(db, obj_in=obj_in, ctx=ctx, commit=commit)
        except IntegrityError:
            db.rollback()
            raise ConflictError(
                f"A tenant with identifier '{obj_in.get('identifier')}' already exists."
            )


# Create singleton instance
tenant = CRUDTenant(
    Tenant,
    updatable_fields=("name", "is_active", "subscription_expires_at"),
)
