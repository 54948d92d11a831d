"""
Save-pipeline hook for audited entities.

Every flush of a Session passes through before_flush:

- new AuditMixin objects get an id, created_at and created_by
- modified objects get updated_at/updated_by; changes to immutable fields
  (creation metadata, owning tenant) are reverted to the committed value
- deleted objects are put back into the session and soft-deleted instead

The acting user is read from session.info["actor_id"], which repositories set
from the caller's TenantContext before writing.
"""
import uuid
from typing import Optional
from uuid import UUID
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value
from app.database import AuditMixin, utcnow
from app.core.tenant_context import TenantContext

ACTOR_KEY = "actor_id"


def bind_actor(db: Session, ctx: TenantContext) -> None:
    """Record who is writing in this session."""
    db.info[ACTOR_KEY] = ctx.user_id


def current_actor(db: Session) -> Optional[UUID]:
    return db.info.get(ACTOR_KEY)


def _stamp_created(obj: AuditMixin, actor: Optional[UUID]) -> None:
    if obj.id is None:
        obj.id = uuid.uuid4()
    obj.created_at = utcnow()
    obj.created_by = actor
    obj.is_deleted = False


def _strip_immutable_changes(session: Session, obj: AuditMixin) -> None:
    state = inspect(obj)
    for field in obj.__immutable_fields__:
        history = state.attrs[field].history
        if not history.has_changes():
            continue
        if history.deleted:
            set_committed_value(obj, field, history.deleted[0])
        else:
            # Old value was never loaded; dropping the pending change keeps the row as is
            session.expire(obj, [field])


def _soft_delete(session: Session, obj: AuditMixin, actor: Optional[UUID]) -> None:
    obj.is_deleted = True
    obj.deleted_at = utcnow()
    obj.deleted_by = actor
    # Re-adding a pending deletion turns it back into an UPDATE
    session.add(obj)


@event.listens_for(Session, "before_flush")
def _audit_before_flush(session, flush_context, instances):
    actor = current_actor(session)

    soft_deleted = set()
    for obj in list(session.deleted):
        if isinstance(obj, AuditMixin):
            _soft_delete(session, obj, actor)
            soft_deleted.add(id(obj))

    for obj in session.new:
        if isinstance(obj, AuditMixin):
            _stamp_created(obj, actor)

    for obj in session.dirty:
        if not isinstance(obj, AuditMixin) or id(obj) in soft_deleted:
            continue
        _strip_immutable_changes(session, obj)
        if session.is_modified(obj, include_collections=False):
            obj.updated_at = utcnow()
            obj.updated_by = actor
