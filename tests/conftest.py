import os

# Settings are read at import time, so the test environment must be in place first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "development")

import uuid
import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401  registers tables on Base.metadata
from app.database import Base, engine, SessionLocal
from app.core.tenant_context import TenantContext
from app.crud.tenant import tenant as tenant_crud
from app.services.identity import identity_manager
from main import app as fastapi_app

STRONG_PASSWORD = "Passw0rd!"


def pytest_configure(config):
    config.addinivalue_line("markers", "auth: mark test as authentication-related")
    config.addinivalue_line("markers", "db: mark test as database-intensive")


@pytest.fixture()
def db():
    """Fresh schema per test on the shared in-memory SQLite connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    return TestClient(fastapi_app)


@pytest.fixture()
def admin_ctx():
    """Unscoped platform caller with an actor id."""
    return TenantContext(user_id=uuid.uuid4())


@pytest.fixture()
def make_tenant(db, admin_ctx):
    def _make(identifier, name=None, **extra):
        obj_in = {"name": name or identifier.title(), "identifier": identifier, "is_active": True}
        obj_in.update(extra)
        return tenant_crud.create(db, obj_in=obj_in, ctx=admin_ctx)
    return _make


@pytest.fixture()
def make_user(db):
    def _make(email, tenant, password=STRONG_PASSWORD, first_name="Test", last_name="User"):
        return identity_manager.create_user(
            db,
            TenantContext(tenant_id=tenant.id),
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            tenant_id=tenant.id,
        )
    return _make


def register_payload(**overrides):
    payload = {
        "email": "alice@acme.com",
        "password": STRONG_PASSWORD,
        "firstName": "Alice",
        "lastName": "Smith",
        "companyName": "Acme Corp",
        "companyIdentifier": "acme-corp",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def registered(client):
    """Register alice@acme.com under Acme Corp and return the auth payload."""
    response = client.post("/api/auth/register", json=register_payload())
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def auth_headers(registered):
    return {"Authorization": f"Bearer {registered['accessToken']}"}
