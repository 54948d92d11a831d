import base64
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import JWTError, jwt
import bcrypt
from app.core.config import settings

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM

# Claim read by the tenant row filter; shared contract with token consumers
TENANT_ID_CLAIM = "TenantId"


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')
    # bcrypt only accepts 72 bytes, so no stored hash can match a longer password
    if len(password_bytes) > 72:
        return False
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def generate_secure_token(nbytes: int) -> str:
    """Return nbytes of cryptographically secure randomness, base64 encoded."""
    return base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii")


def generate_refresh_token() -> str:
    """Opaque refresh token. Not persisted."""
    return generate_secure_token(settings.REFRESH_TOKEN_BYTES)


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> Tuple[str, datetime]:
    """
    Create a signed JWT access token for a user.

    Args:
        user: User with id, email, first_name, last_name and tenant_id
        expires_delta: Optional custom lifetime. Defaults to
            ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        Tuple of (encoded token, expiry timestamp)
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(user.id),
        "email": user.email or "",
        "name": f"{user.first_name or ''} {user.last_name or ''}".strip(),
        TENANT_ID_CLAIM: str(user.tenant_id),
        "jti": str(uuid.uuid4()),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt, expire


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Signature, expiry, issuer and audience are all checked.

    Raises:
        JWTError: If token is invalid or expired
    """
    return jwt.decode(
        token,
        SECRET_KEY,
        algorithms=[ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )


def create_purpose_token(subject: str, purpose: str, stamp: str, expires_delta: timedelta) -> str:
    """Short-lived signed token bound to a subject, a purpose and a stamp value."""
    expire = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(
        {"sub": subject, "purpose": purpose, "stamp": stamp, "exp": expire},
        SECRET_KEY,
        algorithm=ALGORITHM,
    )


def verify_purpose_token(token: str, subject: str, purpose: str, stamp: str) -> bool:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return False
    return (
        payload.get("sub") == subject
        and payload.get("purpose") == purpose
        and payload.get("stamp") == stamp
    )
