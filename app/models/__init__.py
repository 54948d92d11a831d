from .tenant import Tenant
from .user import User
