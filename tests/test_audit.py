import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.core.tenant_context import TenantContext
from app.crud.tenant import tenant as tenant_crud
from app.crud.user import user as user_crud
from app.models.tenant import Tenant
from app.models.user import User

pytestmark = pytest.mark.db


class TestWriteStamping:
    def test_create_assigns_id_and_creation_audit(self, db, admin_ctx):
        tenant = tenant_crud.create(
            db, obj_in={"name": "Acme", "identifier": "acme"}, ctx=admin_ctx
        )

        assert isinstance(tenant.id, uuid.UUID)
        assert tenant.created_at is not None
        assert tenant.created_by == admin_ctx.user_id
        assert tenant.updated_at is None
        assert tenant.is_deleted is False

    def test_create_without_actor_leaves_created_by_empty(self, db):
        tenant = tenant_crud.create(
            db, obj_in={"name": "Acme", "identifier": "acme"}, ctx=TenantContext.system()
        )
        assert tenant.created_by is None

    def test_update_stamps_modification(self, db, make_tenant):
        tenant = make_tenant("acme")
        editor = TenantContext(user_id=uuid.uuid4())

        tenant_crud.update(db, db_obj=tenant, obj_in={"name": "Acme Inc"}, ctx=editor)

        assert tenant.name == "Acme Inc"
        assert tenant.updated_at is not None
        assert tenant.updated_by == editor.user_id

    def test_update_ignores_fields_outside_whitelist(self, db, make_tenant, admin_ctx):
        tenant = make_tenant("acme")

        tenant_crud.update(
            db, db_obj=tenant, obj_in={"identifier": "hijacked", "name": "New"}, ctx=admin_ctx
        )

        assert tenant.identifier == "acme"
        assert tenant.name == "New"

    def test_creation_metadata_is_immutable(self, db, make_tenant, admin_ctx):
        tenant = make_tenant("acme")
        original_created_at = tenant.created_at
        original_created_by = tenant.created_by

        tenant.created_at = original_created_at - timedelta(days=30)
        tenant.created_by = uuid.uuid4()
        tenant_crud.update(db, db_obj=tenant, obj_in={"name": "Renamed"}, ctx=admin_ctx)

        assert tenant.name == "Renamed"
        assert tenant.created_at == original_created_at
        assert tenant.created_by == original_created_by

    def test_user_tenant_is_immutable(self, db, make_tenant, make_user):
        acme = make_tenant("acme")
        globex = make_tenant("globex")
        user = make_user("alice@acme.com", acme)

        user.tenant_id = globex.id
        db.commit()
        db.refresh(user)

        assert user.tenant_id == acme.id


class TestSoftDelete:
    def test_delete_keeps_row_and_flags_it(self, db, make_tenant):
        tenant = make_tenant("acme")
        deleter = TenantContext(user_id=uuid.uuid4())

        tenant_crud.remove(db, db_obj=tenant, ctx=deleter)

        row = db.execute(select(Tenant).where(Tenant.id == tenant.id)).scalar_one()
        assert row.is_deleted is True
        assert row.deleted_at is not None
        assert row.deleted_by == deleter.user_id

    def test_plain_session_delete_is_converted(self, db, make_tenant):
        tenant = make_tenant("acme")

        db.delete(tenant)
        db.commit()

        row = db.execute(select(Tenant).where(Tenant.id == tenant.id)).scalar_one()
        assert row.is_deleted is True

    def test_soft_deleted_rows_are_invisible_to_reads(self, db, make_tenant, admin_ctx):
        kept = make_tenant("kept")
        gone = make_tenant("gone")
        tenant_crud.remove(db, db_obj=gone, ctx=admin_ctx)

        assert tenant_crud.get(db, gone.id, admin_ctx) is None
        assert tenant_crud.get_multi(db, admin_ctx) == [kept]
        assert tenant_crud.count(db, admin_ctx) == 1
        assert tenant_crud.identifier_exists(db, "gone", admin_ctx) is False


class TestTenantScope:
    def test_scoped_reads_only_see_own_tenant(self, db, make_tenant, make_user):
        acme = make_tenant("acme")
        globex = make_tenant("globex")
        alice = make_user("alice@acme.com", acme)
        bob = make_user("bob@globex.com", globex)

        acme_ctx = TenantContext(tenant_id=acme.id, user_id=alice.id)

        visible = user_crud.get_multi(db, acme_ctx)
        assert [u.id for u in visible] == [alice.id]
        assert all(u.tenant_id == acme.id for u in visible)
        assert user_crud.get(db, bob.id, acme_ctx) is None
        assert user_crud.get_by_email(db, "bob@globex.com", acme_ctx) is None

    def test_unscoped_reads_see_all_tenants(self, db, make_tenant, make_user):
        acme = make_tenant("acme")
        globex = make_tenant("globex")
        make_user("alice@acme.com", acme)
        make_user("bob@globex.com", globex)

        assert user_crud.count(db, TenantContext.system()) == 2

    def test_tenant_table_itself_is_not_scoped(self, db, make_tenant):
        acme = make_tenant("acme")
        make_tenant("globex")

        ctx = TenantContext(tenant_id=acme.id)
        assert tenant_crud.count(db, ctx) == 2

    def test_soft_deleted_user_is_hidden_even_in_own_tenant(self, db, make_tenant, make_user):
        acme = make_tenant("acme")
        alice = make_user("alice@acme.com", acme)
        ctx = TenantContext(tenant_id=acme.id)

        user_crud.remove(db, db_obj=alice, ctx=ctx)

        assert user_crud.get(db, alice.id, ctx) is None
        assert db.execute(select(User).where(User.id == alice.id)).scalar_one().is_deleted
