from datetime import datetime
from uuid import UUID
from pydantic import EmailStr, Field, model_validator
from app.schemas.common import CamelModel
from app.schemas.tenant import IDENTIFIER_PATTERN


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    # Tenant created alongside the user
    company_name: str = Field(..., min_length=2, max_length=100)
    company_identifier: str = Field(..., min_length=3, max_length=50, pattern=IDENTIFIER_PATTERN)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserInfoResponse(CamelModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    tenant_id: UUID
    tenant_name: str


class AuthResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_at: datetime
    user: UserInfoResponse


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self
