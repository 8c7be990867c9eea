"""Creator-or-super-admin edit rule for promotions and announcements.

The database enforces the same rule through RLS; this check lets the
dashboard show edit controls only where a mutation could succeed.
"""

import logging
import uuid as uuid_pkg

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.rls import rollback_preserving_context
from app.models.admin import Admin
from app.models.announcement import Announcement
from app.models.content_kind import ContentKind
from app.models.promotion import Promotion

logger = logging.getLogger(__name__)


async def can_edit(
    db: AsyncSession,
    kind: ContentKind,
    entity_id: uuid_pkg.UUID,
    actor: Admin | None,
) -> bool:
    """
    Whether the actor may update or delete the entity.

    Super-admins may edit anything. Everyone else only what they created.
    Lookup failures answer False.
    """
    if actor is None:
        return False
    if actor.is_super_admin:
        return True

    model = Announcement if ContentKind(kind).is_announcement else Promotion
    statement = select(model.created_by_id).where(model.id == entity_id)  # type: ignore[arg-type]
    try:
        result = await db.execute(statement)
        created_by_id = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.warning(f"Permission lookup failed for {kind} {entity_id}: {e}")
        await rollback_preserving_context(db)
        return False

    return created_by_id is not None and created_by_id == actor.id
