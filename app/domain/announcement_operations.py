"""Domain operations for Announcement model."""

import logging

from pydantic import ValidationError

from app.core.events import ContentEventBus
from app.domain.base_operations import BaseOperations
from app.domain.results import StoreErrorKind, StoreResult
from app.models.announcement import Announcement, AnnouncementType, parse_details

logger = logging.getLogger(__name__)


class AnnouncementOperations(BaseOperations[Announcement]):
    """CRUD operations for Announcement model.

    The announcement type is fixed at creation: update payloads never carry it.
    """

    kind = "announcement"
    label = "Announcement"

    def __init__(self, events: ContentEventBus | None = None) -> None:
        super().__init__(Announcement, events)

    def _prepare_create(self, data: dict) -> dict | StoreResult:
        try:
            announcement_type = AnnouncementType(data.get("announcement_type"))
            details = parse_details(announcement_type, data.get("details"))
        except (ValueError, ValidationError) as e:
            logger.info(f"Rejected announcement payload: {e}")
            return StoreResult.failure(StoreErrorKind.VALIDATION, "Invalid announcement details")

        data["announcement_type"] = announcement_type.value
        data["details"] = details.model_dump(mode="json", exclude={"announcement_type"})
        return data

    def _prepare_update(self, data: dict) -> dict:
        data.pop("announcement_type", None)
        if isinstance(data.get("details"), dict):
            data["details"] = {k: v for k, v in data["details"].items() if k != "announcement_type"}
        return data

    def _event_kind(self, row: Announcement) -> str:
        return AnnouncementType(row.announcement_type).value


announcement_ops = AnnouncementOperations()
