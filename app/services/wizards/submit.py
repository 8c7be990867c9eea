import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.events import ContentEventBus, ContentSignal
from app.domain.announcement_operations import AnnouncementOperations, announcement_ops
from app.domain.promotion_operations import PromotionOperations, promotion_ops
from app.domain.results import StoreErrorKind, StoreResult
from app.models.admin import Admin
from app.models.content_kind import ContentKind
from app.services.notices import Notice
from app.services.wizards.kinds import KIND_LABELS
from app.services.wizards.session import WizardSession
from app.services.wizards.stepper import WizardStateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitOutcome:
    result: StoreResult
    notice: Notice

    @property
    def ok(self) -> bool:
        return self.result.ok


async def submit_wizard(
    db: AsyncSession,
    session: WizardSession,
    actor: Admin | None,
    events: ContentEventBus,
    promotions: PromotionOperations | None = None,
    announcements: AnnouncementOperations | None = None,
) -> SubmitOutcome:
    """
    Validate a draft and hand its payload to the store.

    Validation failures never reach the store. On success the draft is
    closed and content-list-changed is published; the store itself
    publishes homepage-content-changed when it applies.
    """
    if session.is_closed or session.form is None or session.kind is None:
        raise WizardStateError("Nothing to submit: choose a kind on an open draft first")

    errors = session.form.submit_errors()
    if errors:
        message = "; ".join(errors)
        return SubmitOutcome(
            StoreResult.failure(StoreErrorKind.VALIDATION, message),
            Notice.error(message),
        )

    kind = session.kind
    ops: PromotionOperations | AnnouncementOperations
    if kind == ContentKind.PROMOTION:
        ops = promotions or promotion_ops
    else:
        ops = announcements or announcement_ops

    payload = session.form.to_payload()
    if session.is_editing:
        result = await ops.update(db, session.entity_id, payload, actor)  # type: ignore[arg-type]
    else:
        result = await ops.create(db, payload, actor)

    if not result.ok:
        logger.info(f"Draft {session.id} submit failed: {result.error.kind.value}")  # type: ignore[union-attr]
        return SubmitOutcome(result, Notice.error(result.error.message))  # type: ignore[union-attr]

    session.mark_submitted()
    await events.emit(
        ContentSignal.CONTENT_LIST_CHANGED,
        kind=kind.value,
        entity_id=result.value.id,  # type: ignore[union-attr]
    )
    verb = "updated" if session.is_editing else "created"
    return SubmitOutcome(result, Notice.success(f"{KIND_LABELS[kind]} {verb}!"))
