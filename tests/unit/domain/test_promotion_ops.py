"""Unit tests for PromotionOperations — all DB calls mocked."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.events import ContentEventBus, ContentSignal
from app.core.rls import RLS_USER_INFO_KEY
from app.domain.promotion_operations import PromotionOperations, normalize_code
from app.domain.results import StoreErrorKind

from tests.helpers.mock_factories import (
    NOW,
    make_mock_admin,
    make_mock_db,
    make_mock_promotion,
    make_mock_usage,
    mock_scalar_result,
    mock_scalars_result,
    unique_violation,
)


def _payload(**overrides) -> dict:
    return {
        "title": "Spring Sale",
        "description": None,
        "discount_type": "percentage",
        "discount_value": 20,
        "code": "spring20",
        "min_purchase_amount": 0,
        "max_discount_amount": None,
        "usage_limit": 0,
        "product_id": None,
        "start_date": NOW,
        "end_date": NOW,
        "show_on_homepage": False,
        "priority": 0,
        "is_active": True,
        **overrides,
    }


class _Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


class TestNormalizeCode:
    def test_upper_cases_and_strips(self):
        assert normalize_code("  spring20 ") == "SPRING20"

    def test_blank_means_no_code(self):
        assert normalize_code("   ") is None
        assert normalize_code("") is None
        assert normalize_code(None) is None


class TestPromotionCreate:
    def setup_method(self):
        self.events = ContentEventBus()
        self.homepage = _Recorder()
        self.events.subscribe(ContentSignal.HOMEPAGE_CONTENT_CHANGED, self.homepage)
        self.ops = PromotionOperations(events=self.events)
        self.db = make_mock_db()
        self.admin = make_mock_admin()

    @pytest.mark.asyncio
    async def test_stores_upper_cased_code_and_stamps_creator(self):
        result = await self.ops.create(self.db, _payload(), self.admin)

        assert result.ok
        promotion = result.value
        assert promotion.code == "SPRING20"
        assert promotion.created_by_id == self.admin.id
        assert promotion.updated_by_id == self.admin.id
        self.db.add.assert_called_once_with(promotion)
        self.db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_blank_code_is_stored_as_none(self):
        result = await self.ops.create(self.db, _payload(code="  "), self.admin)
        assert result.value.code is None

    @pytest.mark.asyncio
    async def test_ignores_client_supplied_usage_count_and_owner(self):
        other = uuid.uuid4()
        result = await self.ops.create(
            self.db, _payload(usage_count=99, created_by_id=other), self.admin
        )
        assert result.value.usage_count == 0
        assert result.value.created_by_id == self.admin.id

    @pytest.mark.asyncio
    async def test_requires_signed_in_admin(self):
        result = await self.ops.create(self.db, _payload(), None)

        assert result.error.kind == StoreErrorKind.UNAUTHENTICATED
        self.db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_code_is_reported(self):
        self.db.flush = AsyncMock(side_effect=unique_violation())

        result = await self.ops.create(self.db, _payload(), self.admin)

        assert result.error.kind == StoreErrorKind.DUPLICATE_CODE
        assert result.error.message == "Promotion code already exists"
        self.db.rollback.assert_awaited_once()
        assert self.homepage.events == []

    @pytest.mark.asyncio
    async def test_backend_failure_rolls_back_and_keeps_rls_context(self):
        admin_id = uuid.uuid4()
        self.db.info[RLS_USER_INFO_KEY] = admin_id
        self.db.flush = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("gone")))

        result = await self.ops.create(self.db, _payload(), self.admin)

        assert result.error.kind == StoreErrorKind.BACKEND
        assert result.error.message == "gone"
        self.db.rollback.assert_awaited_once()
        # RLS context re-applied after the rollback
        self.db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_homepage_event_fires_once_for_homepage_content(self):
        result = await self.ops.create(self.db, _payload(show_on_homepage=True), self.admin)

        assert len(self.homepage.events) == 1
        event = self.homepage.events[0]
        assert event.kind == "promotion"
        assert event.entity_id == result.value.id

    @pytest.mark.asyncio
    async def test_no_homepage_event_when_not_on_homepage(self):
        await self.ops.create(self.db, _payload(show_on_homepage=False), self.admin)
        assert self.homepage.events == []


class TestPromotionUpdate:
    def setup_method(self):
        self.events = ContentEventBus()
        self.homepage = _Recorder()
        self.events.subscribe(ContentSignal.HOMEPAGE_CONTENT_CHANGED, self.homepage)
        self.ops = PromotionOperations(events=self.events)
        self.db = make_mock_db()
        self.admin = make_mock_admin()

    @pytest.mark.asyncio
    async def test_returns_updated_row(self):
        row = make_mock_promotion(title="Renamed", show_on_homepage=False)
        self.db.execute = AsyncMock(return_value=mock_scalar_result(row))

        result = await self.ops.update(self.db, row.id, {"title": "Renamed"}, self.admin)

        assert result.ok
        assert result.value is row

    @pytest.mark.asyncio
    async def test_zero_rows_is_not_found_or_forbidden(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        result = await self.ops.update(self.db, uuid.uuid4(), {"title": "X"}, self.admin)

        assert result.error.kind == StoreErrorKind.NOT_FOUND_OR_FORBIDDEN
        assert "permission" in result.error.message

    @pytest.mark.asyncio
    async def test_duplicate_code_on_update(self):
        self.db.execute = AsyncMock(side_effect=unique_violation())

        result = await self.ops.update(self.db, uuid.uuid4(), {"code": "taken"}, self.admin)

        assert result.error.kind == StoreErrorKind.DUPLICATE_CODE

    @pytest.mark.asyncio
    async def test_toggle_active_emits_homepage_event_once(self):
        row = make_mock_promotion(is_active=False, show_on_homepage=True)
        self.db.execute = AsyncMock(return_value=mock_scalar_result(row))

        result = await self.ops.toggle_active(self.db, row.id, False, self.admin)

        assert result.ok
        assert len(self.homepage.events) == 1

    @pytest.mark.asyncio
    async def test_taking_row_off_homepage_emits_homepage_event(self):
        row = make_mock_promotion(show_on_homepage=False)
        self.db.execute = AsyncMock(
            side_effect=[mock_scalar_result(True), mock_scalar_result(row)]
        )

        result = await self.ops.update(self.db, row.id, {"show_on_homepage": False}, self.admin)

        assert result.ok
        assert len(self.homepage.events) == 1
        assert self.homepage.events[0].entity_id == row.id

    @pytest.mark.asyncio
    async def test_row_never_on_homepage_emits_nothing(self):
        row = make_mock_promotion(show_on_homepage=False)
        self.db.execute = AsyncMock(
            side_effect=[mock_scalar_result(False), mock_scalar_result(row)]
        )

        await self.ops.update(self.db, row.id, {"show_on_homepage": False}, self.admin)

        assert self.homepage.events == []

    @pytest.mark.asyncio
    async def test_requires_signed_in_admin(self):
        result = await self.ops.update(self.db, uuid.uuid4(), {"title": "X"}, None)

        assert result.error.kind == StoreErrorKind.UNAUTHENTICATED
        self.db.execute.assert_not_called()


class TestPromotionDelete:
    def setup_method(self):
        self.events = ContentEventBus()
        self.homepage = _Recorder()
        self.events.subscribe(ContentSignal.HOMEPAGE_CONTENT_CHANGED, self.homepage)
        self.ops = PromotionOperations(events=self.events)
        self.db = make_mock_db()
        self.admin = make_mock_admin()

    @pytest.mark.asyncio
    async def test_returns_deleted_id(self):
        row = make_mock_promotion(show_on_homepage=False)
        self.db.execute = AsyncMock(return_value=mock_scalar_result(row))

        result = await self.ops.delete(self.db, row.id, self.admin)

        assert result.ok
        assert result.value == row.id
        assert self.homepage.events == []

    @pytest.mark.asyncio
    async def test_deleting_homepage_row_emits_homepage_event(self):
        row = make_mock_promotion(show_on_homepage=True)
        self.db.execute = AsyncMock(return_value=mock_scalar_result(row))

        await self.ops.delete(self.db, row.id, self.admin)

        assert len(self.homepage.events) == 1
        assert self.homepage.events[0].kind == "promotion"

    @pytest.mark.asyncio
    async def test_nothing_deleted_is_benign(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        result = await self.ops.delete(self.db, uuid.uuid4(), self.admin)

        assert not result.ok
        assert result.error.kind == StoreErrorKind.NOTHING_DELETED
        assert result.error.is_benign


class TestPromotionReads:
    def setup_method(self):
        self.ops = PromotionOperations(events=ContentEventBus())
        self.db = make_mock_db()

    @pytest.mark.asyncio
    async def test_list_all_returns_rows(self):
        rows = [make_mock_promotion(priority=5), make_mock_promotion(priority=1)]
        self.db.execute = AsyncMock(return_value=mock_scalars_result(rows))

        result = await self.ops.list_all(self.db)

        assert result.value == rows

    @pytest.mark.asyncio
    async def test_list_failure_is_backend_error(self):
        self.db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        result = await self.ops.list_active(self.db)

        assert result.error.kind == StoreErrorKind.BACKEND

    @pytest.mark.asyncio
    async def test_list_homepage_limits_to_five(self):
        self.db.execute = AsyncMock(return_value=mock_scalars_result([]))

        await self.ops.list_homepage(self.db, now=NOW)

        statement = self.db.execute.await_args.args[0]
        assert statement._limit == 5

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        result = await self.ops.get_by_id(self.db, uuid.uuid4())

        assert result.error.kind == StoreErrorKind.NOT_FOUND
        assert result.error.message == "Promotion not found"


class TestGetByCode:
    def setup_method(self):
        self.ops = PromotionOperations(events=ContentEventBus())
        self.db = make_mock_db()

    @pytest.mark.asyncio
    async def test_finds_active_code_case_insensitively(self):
        promotion = make_mock_promotion(code="SPRING20")
        self.db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

        result = await self.ops.get_by_code(self.db, "spring20", now=NOW)

        assert result.value is promotion

    @pytest.mark.asyncio
    async def test_unknown_or_expired_code_is_invalid(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        result = await self.ops.get_by_code(self.db, "NOPE", now=NOW)

        assert result.error.kind == StoreErrorKind.INVALID_CODE
        assert "NOPE" in result.error.message

    @pytest.mark.asyncio
    async def test_blank_code_never_queries(self):
        result = await self.ops.get_by_code(self.db, "  ")

        assert result.error.kind == StoreErrorKind.INVALID_CODE
        self.db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_exhausted_code_reports_usage_limit(self):
        promotion = make_mock_promotion(usage_limit=10, usage_count=10)
        self.db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

        result = await self.ops.get_by_code(self.db, "SPRING20", now=NOW)

        assert result.error.kind == StoreErrorKind.USAGE_LIMIT_REACHED

    @pytest.mark.asyncio
    async def test_unlimited_code_is_never_exhausted(self):
        promotion = make_mock_promotion(usage_limit=0, usage_count=500)
        self.db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

        result = await self.ops.get_by_code(self.db, "SPRING20", now=NOW)

        assert result.ok


class TestGetUsage:
    @pytest.mark.asyncio
    async def test_returns_redemptions(self):
        ops = PromotionOperations(events=ContentEventBus())
        db = make_mock_db()
        usage = [make_mock_usage(), make_mock_usage()]
        db.execute = AsyncMock(return_value=mock_scalars_result(usage))

        result = await ops.get_usage(db, uuid.uuid4())

        assert result.value == usage


class TestHandlerFailureDoesNotFailStore:
    @pytest.mark.asyncio
    async def test_failing_subscriber_is_isolated(self):
        events = ContentEventBus()
        events.subscribe(ContentSignal.HOMEPAGE_CONTENT_CHANGED, MagicMock(side_effect=RuntimeError))
        ops = PromotionOperations(events=events)

        result = await ops.create(make_mock_db(), _payload(show_on_homepage=True), make_mock_admin())

        assert result.ok
