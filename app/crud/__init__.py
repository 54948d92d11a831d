from app.crud.base import CRUDBase
from .tenant import tenant
from .user import user

__all__ = ["CRUDBase", "tenant", "user"]
