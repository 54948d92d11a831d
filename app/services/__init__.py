from app.services.tenant import tenant_service
from app.services.auth import auth_service
from .password_reset import password_reset_service
from .identity import identity_manager

__all__ = ["tenant_service", "auth_service", "password_reset_service", "identity_manager"]
