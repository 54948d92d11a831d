from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class TenantContext:
    """
    Caller identity passed explicitly through service and CRUD layers.

    tenant_id drives the tenant row filter on reads; None means an unscoped
    (platform-level) caller. user_id is the actor stamped on writes.
    """
    tenant_id: Optional[UUID] = None
    user_id: Optional[UUID] = None

    @classmethod
    def system(cls) -> "TenantContext":
        """Unscoped context for unauthenticated or platform operations."""
        return cls()

    @property
    def is_scoped(self) -> bool:
        return self.tenant_id is not None
