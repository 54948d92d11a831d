from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.database import Base, AuditMixin, TenantScopedMixin

class User(Base, AuditMixin, TenantScopedMixin):
    __tablename__ = "user"

    email = Column(String(256), nullable=False)
    normalized_email = Column(String(256), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String(50), nullable=False, default="")
    last_name = Column(String(50), nullable=False, default="")
    tenant_id = Column(Uuid, ForeignKey("tenant.id", ondelete="RESTRICT"), nullable=False, index=True)

    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_token_expiry = Column(DateTime(timezone=True), nullable=True)

    # Identity state: lockout and credential versioning
    access_failed_count = Column(Integer, nullable=False, default=0)
    lockout_enabled = Column(Boolean, nullable=False, default=True)
    lockout_end = Column(DateTime(timezone=True), nullable=True)
    security_stamp = Column(String, nullable=False)

    tenant = relationship("Tenant", back_populates="users")

    __immutable_fields__ = AuditMixin.__immutable_fields__ + ("tenant_id",)

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
