from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import Field
from app.schemas.common import CamelModel

IDENTIFIER_PATTERN = r"^[a-z0-9-]+$"


class TenantCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    identifier: str = Field(..., min_length=3, max_length=50, pattern=IDENTIFIER_PATTERN)


class TenantUpdate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    is_active: bool = True
    subscription_expires_at: Optional[datetime] = None


class TenantBasicResponse(CamelModel):
    id: UUID
    name: str
    identifier: str
    is_active: bool


class TenantResponse(TenantBasicResponse):
    subscription_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class IdentifierCheckResponse(CamelModel):
    identifier: str
    is_available: bool
