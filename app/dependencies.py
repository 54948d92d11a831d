from uuid import UUID
from fastapi import Depends, HTTPException, status, Request
from jose import JWTError
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.core.security import verify_token, TENANT_ID_CLAIM
from app.core.tenant_context import TenantContext
from app.crud.user import user as user_crud


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_tenant_context(request: Request) -> TenantContext:
    """
    Build the caller's TenantContext from the Authorization Bearer token.

    The TenantId claim becomes the tenant filter for every data-access call
    made on behalf of this request; sub becomes the audit actor.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired
    """
    credentials_exception = _credentials_exception()

    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise credentials_exception

    token = authorization[len("Bearer "):]
    try:
        payload = verify_token(token)
        user_id = UUID(payload["sub"])
        tenant_id = UUID(payload[TENANT_ID_CLAIM])
    except (JWTError, KeyError, TypeError, ValueError):
        raise credentials_exception

    return TenantContext(tenant_id=tenant_id, user_id=user_id)


def get_current_user(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
) -> User:
    """
    Return the authenticated User, loaded through the caller's own tenant scope.

    Raises:
        HTTPException 401: If the user no longer exists or is not in the token's tenant
    """
    user = user_crud.get(db, ctx.user_id, ctx)
    if user is None:
        raise _credentials_exception()
    return user
