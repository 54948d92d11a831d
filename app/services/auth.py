from sqlalchemy.orm import Session
from app.core.exceptions import AuthError, AuthReason, ConflictError, NotFoundError
from app.core.logging_config import logger
from app.core.security import create_access_token, generate_refresh_token
from app.core.tenant_context import TenantContext
from app.models.tenant import Tenant
from app.models.user import User
from app.schemas.auth import RegisterRequest, AuthResponse, UserInfoResponse
from app.services.identity import identity_manager, SignInResult
from app.services.tenant import tenant_service

INVALID_CREDENTIALS = "Invalid email or password."
LOCKED_OUT = "Account is locked. Please try again later."
INACTIVE_TENANT = "Your account has been deactivated."


def build_user_info(user: User, tenant: Tenant) -> UserInfoResponse:
    return UserInfoResponse(
        id=user.id,
        email=user.email or "",
        first_name=user.first_name,
        last_name=user.last_name,
        tenant_id=user.tenant_id,
        tenant_name=tenant.name,
    )


class AuthService:
    """
    Registration, login and current-user lookup.

    Login and registration run without a tenant context; the issued access
    token carries the TenantId claim that scopes every later request.
    """

    def __init__(self):
        self.identity = identity_manager
        self.tenants = tenant_service

    def register(self, db: Session, request: RegisterRequest) -> AuthResponse:
        """
        Register a user together with a new tenant.

        Both uniqueness checks run before any write. Tenant and user are then
        created in one transaction, so a failed user creation (e.g. password
        policy) leaves no orphan tenant behind.

        Raises:
            ConflictError: If the email or company identifier is taken
            ValidationError: If the password violates the policy
        """
        system = TenantContext.system()

        if self.identity.find_by_email(db, request.email, system):
            raise ConflictError("Email is already registered.")
        if self.tenants.identifier_exists(db, request.company_identifier, system):
            raise ConflictError("Company identifier is already taken.")

        try:
            tenant_id = self.tenants.create_tenant(
                db,
                request.company_name,
                request.company_identifier,
                system,
                commit=False,
            )
            user = self.identity.create_user(
                db,
                TenantContext(tenant_id=tenant_id),
                email=request.email,
                password=request.password,
                first_name=request.first_name,
                last_name=request.last_name,
                tenant_id=tenant_id,
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.warning(f"Registration rolled back for identifier={request.company_identifier}")
            raise

        db.refresh(user)
        tenant = self.tenants.get_tenant_by_id(db, tenant_id, system)
        logger.info(f"User registered: id={user.id}, tenant_id={tenant_id}")
        return self._auth_response(user, tenant)

    def login(self, db: Session, email: str, password: str) -> AuthResponse:
        """
        Authenticate by email and password.

        Unknown email and wrong password report the same message; lockout and
        inactive tenant are reported distinctly.

        Raises:
            AuthError: On bad credentials, lockout or inactive tenant
        """
        system = TenantContext.system()

        user = self.identity.find_by_email(db, email, system)
        if user is None:
            logger.info("Login failed: unknown email")
            raise AuthError(INVALID_CREDENTIALS, AuthReason.INVALID_CREDENTIALS)

        result = self.identity.check_password_sign_in(db, user, password, lockout_on_failure=True)
        if result == SignInResult.LOCKED_OUT:
            logger.warning(f"Login rejected, account locked: user_id={user.id}")
            raise AuthError(LOCKED_OUT, AuthReason.LOCKED_OUT)
        if result != SignInResult.SUCCESS:
            logger.info(f"Login failed: bad password for user_id={user.id}")
            raise AuthError(INVALID_CREDENTIALS, AuthReason.INVALID_CREDENTIALS)

        try:
            tenant = self.tenants.get_tenant_by_id(db, user.tenant_id, system)
        except NotFoundError:
            tenant = None
        if tenant is None or not tenant.is_active:
            logger.info(f"Login rejected, tenant inactive: tenant_id={user.tenant_id}")
            raise AuthError(INACTIVE_TENANT, AuthReason.INACTIVE_TENANT)

        logger.info(f"User logged in: id={user.id}, tenant_id={tenant.id}")
        return self._auth_response(user, tenant)

    def get_current_user_info(self, db: Session, ctx: TenantContext) -> UserInfoResponse:
        """
        Profile of the authenticated caller.

        Raises:
            AuthError: If the caller's user is not visible in their tenant
        """
        if ctx.user_id is None:
            raise AuthError("Could not validate credentials")
        user = self.identity.crud.get(db, ctx.user_id, ctx)
        if user is None:
            raise AuthError("Could not validate credentials")
        tenant = self.tenants.get_tenant_by_id(db, user.tenant_id, ctx)
        return build_user_info(user, tenant)

    def _auth_response(self, user: User, tenant: Tenant) -> AuthResponse:
        access_token, expires_at = create_access_token(user)
        return AuthResponse(
            access_token=access_token,
            refresh_token=generate_refresh_token(),
            expires_at=expires_at,
            user=build_user_info(user, tenant),
        )


# Create a singleton instance
auth_service = AuthService()
