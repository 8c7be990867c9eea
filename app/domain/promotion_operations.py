"""Domain operations for promotions."""

import uuid as uuid_pkg
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.events import ContentEventBus
from app.domain.base_operations import BaseOperations
from app.domain.results import StoreErrorKind, StoreResult
from app.models.promotion import Promotion, PromotionUsage

DUPLICATE_CODE_MESSAGE = "Promotion code already exists"


def normalize_code(code: str | None) -> str | None:
    """Upper-case a promotion code. Blank codes mean "no code"."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


class PromotionOperations(BaseOperations[Promotion]):
    """CRUD operations for Promotion model."""

    kind = "promotion"
    label = "Promotion"
    duplicate_message = DUPLICATE_CODE_MESSAGE

    def __init__(self, events: ContentEventBus | None = None) -> None:
        super().__init__(Promotion, events)

    def _prepare_create(self, data: dict) -> dict:
        data["code"] = normalize_code(data.get("code"))
        # Counted by the storefront only
        data.pop("usage_count", None)
        return data

    def _prepare_update(self, data: dict) -> dict:
        if "code" in data:
            data["code"] = normalize_code(data["code"])
        data.pop("usage_count", None)
        return data

    async def get_by_code(
        self,
        db: AsyncSession,
        code: str,
        now: datetime | None = None,
    ) -> StoreResult[Promotion]:
        """
        Look up a redeemable promotion by code.

        Only currently active, in-window promotions match. A promotion whose
        usage_limit is set and already reached is reported separately.
        """
        normalized = normalize_code(code)
        if normalized is None:
            return StoreResult.failure(StoreErrorKind.INVALID_CODE, "Promotion code is required")

        now = now or datetime.now(UTC)
        statement = select(Promotion).where(
            Promotion.code == normalized,  # type: ignore[arg-type]
            *self._active_filters(now),
        )
        try:
            result = await db.execute(statement)
            promotion = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._backend_failure(db, "look up code for", e)

        if promotion is None:
            return StoreResult.failure(
                StoreErrorKind.INVALID_CODE,
                f"Invalid or expired promotion code: {normalized}",
            )
        if promotion.usage_exhausted:
            return StoreResult.failure(
                StoreErrorKind.USAGE_LIMIT_REACHED,
                f"Promotion code has reached its usage limit: {normalized}",
            )
        return StoreResult.success(promotion)

    async def get_usage(
        self,
        db: AsyncSession,
        promotion_id: uuid_pkg.UUID,
    ) -> StoreResult[list[PromotionUsage]]:
        """Redemptions recorded for a promotion, newest first."""
        statement = (
            select(PromotionUsage)
            .where(PromotionUsage.promotion_id == promotion_id)  # type: ignore[arg-type]
            .order_by(PromotionUsage.used_at.desc())  # type: ignore[attr-defined]
        )
        return await self._fetch_list(db, statement, "list usage for")


promotion_ops = PromotionOperations()
