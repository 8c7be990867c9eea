"""
Wizard drafts: the kind chooser plus one stepper over one form.

A draft for new content starts in the chooser with no kind. Picking a kind
starts that kind's four-step wizard with default field values. Going back
from step 1 returns to the chooser and throws the collected fields away.

A draft opened on existing content skips the chooser: promotions reopen as
promotions, announcements as their own type, and the kind cannot change.
Going back from step 1 cancels the edit instead.
"""

import logging
import uuid as uuid_pkg
from datetime import UTC, datetime
from typing import Any

from cachetools import TTLCache  # type: ignore[import-untyped]

from app.config.settings import settings
from app.models.announcement import URGENCY_ICONS, AlertUrgency, Announcement, AnnouncementType
from app.models.content_kind import ContentKind
from app.models.promotion import Promotion
from app.services.wizards.forms import FORM_TYPES, ContentForm, form_from_entity
from app.services.wizards.kinds import WIZARD_STEPS
from app.services.wizards.stepper import LinearStepper, StepDescriptor, WizardStateError

logger = logging.getLogger(__name__)

MAX_DRAFTS = 1000


class DraftNotFoundError(Exception):
    """Raised when a draft does not exist, has expired, or belongs to someone else."""

    pass


def kind_of(entity: Promotion | Announcement) -> ContentKind:
    if isinstance(entity, Promotion):
        return ContentKind.PROMOTION
    return ContentKind(AnnouncementType(entity.announcement_type).value)


class WizardSession:
    def __init__(self, owner_id: uuid_pkg.UUID, entity: Promotion | Announcement | None = None):
        self.id = uuid_pkg.uuid4()
        self.owner_id = owner_id
        self.entity_id: uuid_pkg.UUID | None = None
        self.kind: ContentKind | None = None
        self.form: ContentForm | None = None
        self.stepper: LinearStepper | None = None
        self.cancelled = False
        self.submitted = False
        self.updated_at = datetime.now(UTC)

        if entity is not None:
            self.entity_id = entity.id
            self._start(kind_of(entity), form_from_entity(entity))

    @property
    def is_editing(self) -> bool:
        return self.entity_id is not None

    @property
    def in_chooser(self) -> bool:
        return self.kind is None

    @property
    def is_closed(self) -> bool:
        return self.cancelled or self.submitted

    @property
    def step(self) -> StepDescriptor | None:
        return self.stepper.step if self.stepper else None

    def _start(self, kind: ContentKind, form: ContentForm) -> None:
        self.kind = kind
        self.form = form
        self.stepper = LinearStepper(WIZARD_STEPS[kind])
        self._touch()

    def _reset_to_chooser(self) -> None:
        self.kind = None
        self.form = None
        self.stepper = None
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now(UTC)

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise WizardStateError("This draft is closed")

    def _ensure_started(self) -> tuple[ContentForm, LinearStepper]:
        self._ensure_open()
        if self.form is None or self.stepper is None:
            raise WizardStateError("Choose a content kind first")
        return self.form, self.stepper

    def choose(self, kind: ContentKind | str) -> None:
        self._ensure_open()
        if self.is_editing:
            raise WizardStateError("The kind of existing content cannot be changed")
        if self.kind is not None:
            raise WizardStateError("A kind is already chosen; go back to the chooser to switch")
        kind = ContentKind(kind)
        self._start(kind, FORM_TYPES[kind]())

    def update(self, changes: dict[str, Any]) -> None:
        """
        Apply field edits. Raises pydantic.ValidationError on bad values.

        Picking an alert urgency also picks its icon, and a critical alert
        becomes non-dismissible unless the same edit says otherwise.
        """
        form, _ = self._ensure_started()
        form = form.with_changes(changes)

        if self.kind == ContentKind.ALERT and changes.get("urgency") is not None:
            urgency = AlertUrgency(form.urgency)  # type: ignore[attr-defined]
            derived: dict[str, Any] = {"icon": URGENCY_ICONS[urgency]}
            if urgency == AlertUrgency.CRITICAL:
                derived["dismissible"] = False
            derived = {key: v for key, v in derived.items() if key not in changes}
            if derived:
                form = form.with_changes(derived)

        self.form = form
        self._touch()

    def can_advance(self) -> bool:
        form, stepper = self._ensure_started()
        return stepper.can_advance(form)

    def next(self) -> bool:
        form, stepper = self._ensure_started()
        moved = stepper.next(form)
        self._touch()
        return moved

    def previous(self) -> None:
        _, stepper = self._ensure_started()
        if stepper.previous():
            self._touch()
            return
        if self.is_editing:
            self.cancel()
        else:
            self._reset_to_chooser()

    def go_to(self, step: int) -> None:
        _, stepper = self._ensure_started()
        stepper.go_to(step)
        self._touch()

    def cancel(self) -> None:
        self.cancelled = True
        self._touch()

    def mark_submitted(self) -> None:
        self.submitted = True
        self._touch()


class DraftRegistry:
    """In-process store of open wizard drafts, each visible only to its owner."""

    def __init__(self, ttl_seconds: int | None = None, maxsize: int = MAX_DRAFTS):
        self._drafts: TTLCache[uuid_pkg.UUID, WizardSession] = TTLCache(
            maxsize=maxsize,
            ttl=ttl_seconds if ttl_seconds is not None else settings.draft_ttl_seconds,
        )

    def open(
        self,
        owner_id: uuid_pkg.UUID,
        entity: Promotion | Announcement | None = None,
    ) -> WizardSession:
        session = WizardSession(owner_id, entity)
        self._drafts[session.id] = session
        logger.debug(f"Opened draft {session.id} for admin {owner_id}")
        return session

    def get(self, owner_id: uuid_pkg.UUID, draft_id: uuid_pkg.UUID) -> WizardSession:
        session = self._drafts.get(draft_id)
        if session is None or session.owner_id != owner_id:
            raise DraftNotFoundError(f"Draft {draft_id} not found")
        # Re-insert to restart the expiry clock
        self._drafts[draft_id] = session
        return session

    def discard(self, owner_id: uuid_pkg.UUID, draft_id: uuid_pkg.UUID) -> None:
        self.get(owner_id, draft_id)
        del self._drafts[draft_id]

    def list_for(self, owner_id: uuid_pkg.UUID) -> list[WizardSession]:
        return [s for s in self._drafts.values() if s.owner_id == owner_id]

    def clear(self) -> None:
        self._drafts.clear()


draft_registry = DraftRegistry()
