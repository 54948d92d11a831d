import math
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
from app.crud.tenant import tenant as tenant_crud, normalize_identifier
from app.core.exceptions import ValidationError, ConflictError, NotFoundError
from app.core.logging_config import logger
from app.core.tenant_context import TenantContext
from app.models.tenant import Tenant

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp_paging(page_number: int, page_size: int) -> Tuple[int, int]:
    """Clamp paging inputs: page_number >= 1, page_size in [1, 100] (default 10)."""
    if page_number < 1:
        page_number = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page_number, page_size


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if page_size else 0


class TenantService:
    """
    Service layer for tenant business logic.

    Validation and uniqueness rules live here; filtering of soft-deleted
    tenants is handled by the CRUD layer.
    """

    def __init__(self):
        self.crud = tenant_crud

    def create_tenant(
        self,
        db: Session,
        name: str,
        identifier: str,
        ctx: TenantContext,
        commit: bool = True
    ) -> UUID:
        """
        Create a new tenant.

        Args:
            db: Database session
            name: Display name
            identifier: Slug, stored lowercase
            ctx: Caller context
            commit: Whether to commit, or only flush inside a caller's transaction

        Returns:
            ID of the created tenant

        Raises:
            ValidationError: If name or identifier is blank
            ConflictError: If the identifier is already taken
        """
        if not name or not name.strip():
            raise ValidationError("Tenant name is required.")
        if not identifier or not identifier.strip():
            raise ValidationError("Tenant identifier is required.")

        if self.identifier_exists(db, identifier, ctx):
            raise ConflictError(f"A tenant with identifier '{identifier}' already exists.")

        tenant = self.crud.create(
            db,
            obj_in={
                "name": name,
                "identifier": normalize_identifier(identifier),
                "is_active": True,
            },
            ctx=ctx,
            commit=commit,
        )
        logger.info(f"Tenant created: id={tenant.id}, identifier={tenant.identifier}")
        return tenant.id

    def get_tenant_by_id(self, db: Session, tenant_id: UUID, ctx: TenantContext) -> Tenant:
        tenant = self.crud.get(db, tenant_id, ctx)
        if not tenant:
            raise NotFoundError(f"Tenant with ID '{tenant_id}' not found.")
        return tenant

    def get_tenant_by_name(self, db: Session, name: str, ctx: TenantContext) -> Tenant:
        if not name or not name.strip():
            raise ValidationError("Tenant name is required.")
        tenant = self.crud.get_by_name(db, name, ctx)
        if not tenant:
            raise NotFoundError(f"Tenant with name '{name}' not found.")
        return tenant

    def get_tenant_by_identifier(self, db: Session, identifier: str, ctx: TenantContext) -> Tenant:
        if not identifier or not identifier.strip():
            raise ValidationError("Tenant identifier is required.")
        tenant = self.crud.get_by_identifier(db, identifier, ctx)
        if not tenant:
            raise NotFoundError(f"Tenant with identifier '{identifier}' not found.")
        return tenant

    def get_all_tenants(self, db: Session, ctx: TenantContext) -> List[Tenant]:
        return self.crud.get_multi(db, ctx)

    def get_tenants_paged(
        self,
        db: Session,
        page_number: int,
        page_size: int,
        ctx: TenantContext
    ) -> Tuple[List[Tenant], int]:
        """
        Get one page of tenants.

        Returns:
            Tuple of (items, total count)
        """
        page_number, page_size = clamp_paging(page_number, page_size)
        return self.crud.get_paged(db, ctx, page_number=page_number, page_size=page_size)

    def update_tenant(
        self,
        db: Session,
        tenant_id: UUID,
        name: str,
        is_active: bool,
        subscription_expires_at: Optional[datetime],
        ctx: TenantContext
    ) -> Tenant:
        """
        Update a tenant's name, active flag and subscription expiry.

        Raises:
            ValidationError: If name is blank
            NotFoundError: If tenant not found
        """
        if not name or not name.strip():
            raise ValidationError("Tenant name is required.")

        tenant = self.get_tenant_by_id(db, tenant_id, ctx)
        return self.crud.update(
            db,
            db_obj=tenant,
            obj_in={
                "name": name,
                "is_active": is_active,
                "subscription_expires_at": subscription_expires_at,
            },
            ctx=ctx,
        )

    def delete_tenant(self, db: Session, tenant_id: UUID, ctx: TenantContext) -> None:
        """
        Soft-delete a tenant. Its users are left in place.

        Raises:
            NotFoundError: If tenant not found
        """
        tenant = self.get_tenant_by_id(db, tenant_id, ctx)
        self.crud.remove(db, db_obj=tenant, ctx=ctx)
        logger.info(f"Tenant soft-deleted: id={tenant_id}, by={ctx.user_id}")

    def identifier_exists(self, db: Session, identifier: str, ctx: TenantContext) -> bool:
        return self.crud.identifier_exists(db, identifier, ctx)


# Create a singleton instance
tenant_service = TenantService()
