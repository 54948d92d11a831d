from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.database import get_db
from app.dependencies import get_tenant_context, get_current_user
from app.core.tenant_context import TenantContext
from app.core.logging_config import logger
from app.schemas.common import PagedResponse
from app.schemas.tenant import (
    TenantCreate,
    TenantUpdate,
    TenantResponse,
    TenantBasicResponse,
    IdentifierCheckResponse,
)
from app.services.tenant import tenant_service, clamp_paging, total_pages

# Every tenant route requires a valid bearer token
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    tenant_data: TenantCreate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """
    Create a new tenant.

    Raises:
        409: If the identifier is already taken
    """
    logger.info(f"Creating tenant: identifier={tenant_data.identifier}, by={ctx.user_id}")
    tenant_id = tenant_service.create_tenant(db, tenant_data.name, tenant_data.identifier, ctx)
    return tenant_service.get_tenant_by_id(db, tenant_id, ctx)


@router.get("", response_model=List[TenantBasicResponse])
def get_tenants(
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """Retrieve all tenants that are not deleted."""
    return tenant_service.get_all_tenants(db, ctx)


@router.get("/paged", response_model=PagedResponse[TenantBasicResponse])
def get_tenants_paged(
    page_number: int = Query(1, alias="pageNumber"),
    page_size: int = Query(10, alias="pageSize"),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """
    Retrieve tenants one page at a time.

    pageNumber is 1-based; pageSize is clamped to [1, 100].
    """
    page_number, page_size = clamp_paging(page_number, page_size)
    items, total_count = tenant_service.get_tenants_paged(db, page_number, page_size, ctx)
    return PagedResponse[TenantBasicResponse](
        items=[TenantBasicResponse.model_validate(t) for t in items],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size),
    )


@router.get("/by-identifier/{identifier}", response_model=TenantResponse)
def get_tenant_by_identifier(
    identifier: str,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """Retrieve a tenant by its identifier (slug), case-insensitively."""
    return tenant_service.get_tenant_by_identifier(db, identifier, ctx)


@router.get("/by-name/{name}", response_model=TenantResponse)
def get_tenant_by_name(
    name: str,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    return tenant_service.get_tenant_by_name(db, name, ctx)


@router.get("/check-identifier/{identifier}", response_model=IdentifierCheckResponse)
def check_identifier(
    identifier: str,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """Report whether an identifier is still free."""
    exists = tenant_service.identifier_exists(db, identifier, ctx)
    return IdentifierCheckResponse(identifier=identifier, is_available=not exists)


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """
    Retrieve a tenant by ID.

    Raises:
        404: If tenant not found or deleted
    """
    return tenant_service.get_tenant_by_id(db, tenant_id, ctx)


@router.put("/{tenant_id}", response_model=TenantResponse)
def update_tenant(
    tenant_id: UUID,
    tenant_data: TenantUpdate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """
    Update a tenant's name, active flag and subscription expiry.

    Raises:
        404: If tenant not found
    """
    return tenant_service.update_tenant(
        db,
        tenant_id,
        tenant_data.name,
        tenant_data.is_active,
        tenant_data.subscription_expires_at,
        ctx,
    )


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context)
):
    """
    Soft-delete a tenant.

    Raises:
        404: If tenant not found
    """
    tenant_service.delete_tenant(db, tenant_id, ctx)
    return None
