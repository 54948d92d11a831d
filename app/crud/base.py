from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Tuple, Iterable
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select, func, Select
from app.database import Base, AuditMixin
from app.core.audit import bind_actor
from app.core.tenant_context import TenantContext

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """
    Generic repository with soft-delete and tenant filtering built in.

    Every read goes through _select(), which always excludes soft-deleted rows
    and, for tenant-scoped models, restricts rows to ctx.tenant_id when the
    caller has one. Writes record ctx.user_id as the audit actor; the audit
    listener in app.core.audit does the stamping.

    Type Parameters:
        ModelType: SQLAlchemy model class
    """

    def __init__(self, model: Type[ModelType], updatable_fields: Iterable[str] = ()):
        """
        Initialize CRUD object with model class.

        Args:
            model: SQLAlchemy model class
            updatable_fields: Whitelist of fields update() may change
        """
        self.model = model
        self.updatable_fields = frozenset(updatable_fields)

    def _select(self, ctx: TenantContext, *criteria: Any) -> Select:
        stmt = select(self.model)
        if issubclass(self.model, AuditMixin):
            stmt = stmt.where(self.model.is_deleted.is_(False))
        if getattr(self.model, "__tenant_scoped__", False) and ctx.tenant_id is not None:
            stmt = stmt.where(self.model.tenant_id == ctx.tenant_id)
        if criteria:
            stmt = stmt.where(*criteria)
        return stmt

    def get(self, db: Session, id: UUID, ctx: TenantContext) -> Optional[ModelType]:
        """
        Retrieve a single record by ID.

        Returns:
            Model instance or None if missing, soft-deleted or outside the
            caller's tenant
        """
        return db.execute(self._select(ctx, self.model.id == id)).scalar_one_or_none()

    def get_by(self, db: Session, ctx: TenantContext, *criteria: Any) -> Optional[ModelType]:
        """Retrieve the first record matching the criteria."""
        return db.execute(self._select(ctx, *criteria).limit(1)).scalars().first()

    def exists(self, db: Session, ctx: TenantContext, *criteria: Any) -> bool:
        stmt = select(self._select(ctx, *criteria).exists())
        return bool(db.execute(stmt).scalar())

    def count(self, db: Session, ctx: TenantContext, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self._select(ctx, *criteria).subquery())
        return db.execute(stmt).scalar_one()

    def get_multi(
        self,
        db: Session,
        ctx: TenantContext,
        *,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[ModelType]:
        """
        Retrieve multiple records, oldest first.

        Args:
            db: Database session
            ctx: Caller context for filtering
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)
        """
        stmt = self._select(ctx).order_by(*self._ordering()).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(db.execute(stmt).scalars().all())

    def get_paged(
        self,
        db: Session,
        ctx: TenantContext,
        *,
        page_number: int,
        page_size: int
    ) -> Tuple[List[ModelType], int]:
        """
        Retrieve one page of records and the total count.

        Page numbers are 1-based; callers clamp the inputs.
        """
        total = self.count(db, ctx)
        items = self.get_multi(
            db, ctx, skip=(page_number - 1) * page_size, limit=page_size
        )
        return items, total

    def create(
        self,
        db: Session,
        *,
        obj_in: Dict[str, Any],
        ctx: TenantContext,
        commit: bool = True
    ) -> ModelType:
        """
        Create a new record.

        Args:
            db: Database session
            obj_in: Column values
            ctx: Caller context (audit actor)
            commit: Commit immediately, or only flush so the caller can
                compose a larger transaction

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        self._save(db, ctx, db_obj, commit)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Dict[str, Any],
        ctx: TenantContext,
        commit: bool = True
    ) -> ModelType:
        """
        Update an existing record.

        Only whitelisted fields are applied; anything else in obj_in is ignored.
        The db_obj must have been loaded through get() or similar so it is
        already filtered for the caller.
        """
        for field, value in obj_in.items():
            if field in self.updatable_fields:
                setattr(db_obj, field, value)

        db.add(db_obj)
        self._save(db, ctx, db_obj, commit)
        return db_obj

    def remove(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        ctx: TenantContext,
        commit: bool = True
    ) -> ModelType:
        """Delete a record. Audited models are soft-deleted by the flush hook."""
        db.delete(db_obj)
        self._save(db, ctx, db_obj, commit)
        return db_obj

    def _save(self, db: Session, ctx: TenantContext, db_obj: ModelType, commit: bool) -> None:
        bind_actor(db, ctx)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()

    def _ordering(self):
        if issubclass(self.model, AuditMixin):
            return (self.model.created_at, self.model.id)
        return (self.model.id,)
