from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from app.database import Base, AuditMixin

class Tenant(Base, AuditMixin):
    __tablename__ = "tenant"

    name = Column(String(100), nullable=False, index=True)
    identifier = Column(String(50), nullable=False, unique=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Users are never cascade-deleted with their tenant
    users = relationship("User", back_populates="tenant", passive_deletes="all")
