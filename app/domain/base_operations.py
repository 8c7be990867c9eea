"""Generic content store shared by promotions and announcements.

Every operation returns a StoreResult instead of raising. Database errors
are logged, the transaction is rolled back, and the failure is mapped to a
StoreErrorKind the caller can act on.
"""

import logging
import uuid as uuid_pkg
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.core.events import ContentEventBus, ContentSignal, content_events
from app.core.rls import rollback_preserving_context
from app.domain.results import StoreErrorKind, StoreResult
from app.models.admin import Admin

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)

UNIQUE_VIOLATION = "23505"
HOMEPAGE_LIMIT = 5

NOT_SIGNED_IN_MESSAGE = "You must be signed in to change content"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports SQLSTATE 23505."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == UNIQUE_VIOLATION
    return "duplicate key" in str(exc).lower()


def error_message(exc: SQLAlchemyError) -> str:
    """Driver message without SQLAlchemy's statement and parameter dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class BaseOperations(Generic[ModelType]):
    """CRUD operations for content tables with a display window."""

    kind = "content"
    label = "Content"
    duplicate_message = "Content already exists"

    def __init__(self, model: type[ModelType], events: ContentEventBus | None = None):
        self.model = model
        self.events = events if events is not None else content_events

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    def _ordering(self) -> tuple[Any, ...]:
        return (
            self.model.priority.desc(),  # type: ignore[attr-defined]
            self.model.created_at.desc(),  # type: ignore[attr-defined]
        )

    def _active_filters(self, now: datetime) -> tuple[Any, ...]:
        return (
            self.model.is_active == True,  # type: ignore[attr-defined]  # noqa: E712
            self.model.start_date <= now,  # type: ignore[attr-defined]
            self.model.end_date >= now,  # type: ignore[attr-defined]
        )

    async def get(self, db: AsyncSession, id: uuid_pkg.UUID) -> ModelType | None:
        """Get a single record by ID."""
        statement = select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, id: uuid_pkg.UUID) -> StoreResult[ModelType]:
        try:
            row = await self.get(db, id)
        except SQLAlchemyError as e:
            return await self._backend_failure(db, "get", e)
        if row is None:
            return StoreResult.failure(StoreErrorKind.NOT_FOUND, f"{self.label} not found")
        return StoreResult.success(row)

    async def list_all(self, db: AsyncSession) -> StoreResult[list[ModelType]]:
        """All rows, highest priority first, then newest."""
        statement = select(self.model).order_by(*self._ordering())
        return await self._fetch_list(db, statement, "list")

    async def list_active(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> StoreResult[list[ModelType]]:
        """Rows that are switched on and whose window contains now."""
        now = now or datetime.now(UTC)
        statement = select(self.model).where(*self._active_filters(now)).order_by(*self._ordering())
        return await self._fetch_list(db, statement, "list active")

    async def list_homepage(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> StoreResult[list[ModelType]]:
        """Active rows flagged for the homepage, at most five."""
        now = now or datetime.now(UTC)
        statement = (
            select(self.model)
            .where(
                *self._active_filters(now),
                self.model.show_on_homepage == True,  # type: ignore[attr-defined]  # noqa: E712
            )
            .order_by(*self._ordering())
            .limit(HOMEPAGE_LIMIT)
        )
        return await self._fetch_list(db, statement, "list homepage")

    async def _fetch_list(self, db: AsyncSession, statement: Any, action: str) -> StoreResult:
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            return await self._backend_failure(db, action, e)
        return StoreResult.success(list(result.scalars().all()))

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────

    def _prepare_create(self, data: dict) -> dict | StoreResult:
        """Normalize a create payload. Returning a StoreResult rejects it."""
        return data

    def _prepare_update(self, data: dict) -> dict:
        """Normalize a partial update payload."""
        return data

    def _event_kind(self, row: ModelType) -> str:
        return self.kind

    async def create(
        self,
        db: AsyncSession,
        payload: dict,
        actor: Admin | None,
    ) -> StoreResult[ModelType]:
        """Insert a row stamped with the acting admin."""
        if actor is None:
            return StoreResult.failure(StoreErrorKind.UNAUTHENTICATED, NOT_SIGNED_IN_MESSAGE)

        data = self._prepare_create(dict(payload))
        if isinstance(data, StoreResult):
            return data
        for server_owned in ("id", "created_by_id", "updated_by_id", "created_at", "updated_at"):
            data.pop(server_owned, None)

        db_obj = self.model(**data, created_by_id=actor.id, updated_by_id=actor.id)
        db.add(db_obj)
        try:
            await db.flush()
            await db.refresh(db_obj)
        except IntegrityError as e:
            if is_unique_violation(e):
                await rollback_preserving_context(db)
                logger.info(f"Rejected duplicate {self.kind} from admin {actor.id}")
                return StoreResult.failure(StoreErrorKind.DUPLICATE_CODE, self.duplicate_message)
            return await self._backend_failure(db, "create", e)
        except SQLAlchemyError as e:
            return await self._backend_failure(db, "create", e)

        logger.info(f"Admin {actor.id} created {self.kind} {db_obj.id}")  # type: ignore[attr-defined]
        await self._notify_homepage(db_obj)
        return StoreResult.success(db_obj)

    async def update(
        self,
        db: AsyncSession,
        id: uuid_pkg.UUID,
        payload: dict,
        actor: Admin | None,
    ) -> StoreResult[ModelType]:
        """Apply a partial update and return the row as stored.

        RLS hides rows the actor may not touch, so zero matched rows means
        either "missing" or "not yours", and the error says both.
        """
        if actor is None:
            return StoreResult.failure(StoreErrorKind.UNAUTHENTICATED, NOT_SIGNED_IN_MESSAGE)

        values = self._prepare_update(dict(payload))
        values.pop("id", None)
        values.pop("created_by_id", None)
        values.pop("created_at", None)
        values["updated_by_id"] = actor.id
        values["updated_at"] = datetime.now(UTC)

        was_on_homepage = False
        if "show_on_homepage" in values:
            try:
                was_on_homepage = bool(await self._homepage_flag(db, id))
            except SQLAlchemyError as e:
                return await self._backend_failure(db, "update", e)

        statement = (
            sa_update(self.model)
            .where(self.model.id == id)  # type: ignore[attr-defined]
            .values(**values)
            .returning(self.model)
        )
        try:
            result = await db.execute(statement)
            row = result.scalar_one_or_none()
        except IntegrityError as e:
            if is_unique_violation(e):
                await rollback_preserving_context(db)
                return StoreResult.failure(StoreErrorKind.DUPLICATE_CODE, self.duplicate_message)
            return await self._backend_failure(db, "update", e)
        except SQLAlchemyError as e:
            return await self._backend_failure(db, "update", e)

        if row is None:
            logger.info(f"Update of {self.kind} {id} by admin {actor.id} matched no rows")
            return StoreResult.failure(
                StoreErrorKind.NOT_FOUND_OR_FORBIDDEN,
                f"{self.label} not found or you do not have permission to change it",
            )

        logger.info(f"Admin {actor.id} updated {self.kind} {id}")
        await self._notify_homepage(row, was_on_homepage)
        return StoreResult.success(row)

    async def toggle_active(
        self,
        db: AsyncSession,
        id: uuid_pkg.UUID,
        is_active: bool,
        actor: Admin | None,
    ) -> StoreResult[ModelType]:
        return await self.update(db, id, {"is_active": is_active}, actor)

    async def delete(
        self,
        db: AsyncSession,
        id: uuid_pkg.UUID,
        actor: Admin | None,
    ) -> StoreResult[uuid_pkg.UUID]:
        """Hard delete. Deleting something already gone is reported as benign."""
        if actor is None:
            return StoreResult.failure(StoreErrorKind.UNAUTHENTICATED, NOT_SIGNED_IN_MESSAGE)

        statement = (
            sa_delete(self.model)
            .where(self.model.id == id)  # type: ignore[attr-defined]
            .returning(self.model)
        )
        try:
            result = await db.execute(statement)
            deleted = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._backend_failure(db, "delete", e)

        if deleted is None:
            logger.info(f"Delete of {self.kind} {id} by admin {actor.id} matched no rows")
            return StoreResult.failure(
                StoreErrorKind.NOTHING_DELETED,
                f"{self.label} was already deleted or is not yours to delete",
            )

        logger.info(f"Admin {actor.id} deleted {self.kind} {id}")
        await self._notify_homepage(deleted)
        return StoreResult.success(deleted.id)  # type: ignore[attr-defined]

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    async def _homepage_flag(self, db: AsyncSession, id: uuid_pkg.UUID) -> bool | None:
        statement = select(self.model.show_on_homepage).where(  # type: ignore[attr-defined]
            self.model.id == id  # type: ignore[attr-defined]
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def _notify_homepage(self, row: ModelType, was_on_homepage: bool = False) -> None:
        """Signal the homepage feed when the row is, or just stopped being, on it."""
        if was_on_homepage or getattr(row, "show_on_homepage", False):
            await self.events.emit(
                ContentSignal.HOMEPAGE_CONTENT_CHANGED,
                kind=self._event_kind(row),
                entity_id=row.id,  # type: ignore[attr-defined]
            )

    async def _backend_failure(
        self,
        db: AsyncSession,
        action: str,
        exc: SQLAlchemyError,
    ) -> StoreResult:
        logger.error(f"Failed to {action} {self.kind}: {exc}")
        await rollback_preserving_context(db)
        return StoreResult.failure(StoreErrorKind.BACKEND, error_message(exc))
