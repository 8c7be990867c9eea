"""Promotion API endpoint tests — database mocked, store logic real."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from app.core.events import ContentSignal

from tests.helpers.mock_factories import (
    make_mock_promotion,
    make_mock_usage,
    mock_scalar_result,
    mock_scalars_result,
    unique_violation,
)


def _body(**overrides) -> dict:
    return {
        "title": "Spring Sale",
        "discount_type": "percentage",
        "discount_value": 20,
        "code": "spring20",
        "start_date": "2026-05-01T00:00:00Z",
        "end_date": "2026-05-31T23:59:59Z",
        "show_on_homepage": False,
        **overrides,
    }


@pytest.fixture
def list_events(event_bus):
    received = []
    event_bus.subscribe(ContentSignal.CONTENT_LIST_CHANGED, received.append)
    return received


@pytest.mark.anyio
async def test_create_promotion(api_client: AsyncClient, admin, list_events):
    """POST /api/v1/promotions stores the code upper-cased and stamps the creator."""
    resp = await api_client.post("/api/v1/promotions", json=_body())
    assert resp.status_code == 201
    data = resp.json()
    assert data["code"] == "SPRING20"
    assert data["created_by_id"] == str(admin.id)
    assert data["usage_count"] == 0
    assert len(list_events) == 1


@pytest.mark.anyio
async def test_create_duplicate_code(api_client: AsyncClient, db, list_events):
    """POST /api/v1/promotions answers 409 when the code is taken."""
    db.flush = AsyncMock(side_effect=unique_violation())

    resp = await api_client.post("/api/v1/promotions", json=_body(code="SPRING20"))
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Promotion code already exists"
    assert list_events == []


@pytest.mark.anyio
async def test_create_percentage_over_100(api_client: AsyncClient):
    resp = await api_client.post("/api/v1/promotions", json=_body(discount_value=150))
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_create_end_before_start(api_client: AsyncClient):
    resp = await api_client.post(
        "/api/v1/promotions",
        json=_body(start_date="2026-06-01T00:00:00Z", end_date="2026-05-01T00:00:00Z"),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "End date must be on or after the start date"


@pytest.mark.anyio
async def test_create_zero_discount_is_rejected(api_client: AsyncClient):
    resp = await api_client.post("/api/v1/promotions", json=_body(discount_value=0))
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_list_promotions(api_client: AsyncClient, db):
    promotions = [make_mock_promotion(priority=9), make_mock_promotion(priority=1)]
    db.execute = AsyncMock(return_value=mock_scalars_result(promotions))

    resp = await api_client.get("/api/v1/promotions")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [str(p.id) for p in promotions]


@pytest.mark.anyio
async def test_get_missing_promotion(api_client: AsyncClient, db):
    db.execute = AsyncMock(return_value=mock_scalar_result(None))

    resp = await api_client.get(f"/api/v1/promotions/{uuid.uuid4()}")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_update_someone_elses_promotion(api_client: AsyncClient):
    """PATCH answers the combined not-found-or-forbidden 404."""
    with patch("app.api.v1.promotions.can_edit", AsyncMock(return_value=False)):
        resp = await api_client.patch(f"/api/v1/promotions/{uuid.uuid4()}", json={"title": "Mine"})
    assert resp.status_code == 404
    assert "permission" in resp.json()["detail"]


@pytest.mark.anyio
async def test_update_promotion(api_client: AsyncClient, db, list_events):
    promotion = make_mock_promotion(title="Renamed", show_on_homepage=False)
    db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

    with patch("app.api.v1.promotions.can_edit", AsyncMock(return_value=True)):
        resp = await api_client.patch(
            f"/api/v1/promotions/{promotion.id}", json={"title": "Renamed"}
        )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Renamed"
    assert len(list_events) == 1


@pytest.mark.anyio
async def test_update_checks_merged_terms(api_client: AsyncClient, db):
    """Raising a percentage discount above 100 is caught against the stored type."""
    promotion = make_mock_promotion(discount_type="percentage", discount_value=20)
    db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

    with patch("app.api.v1.promotions.can_edit", AsyncMock(return_value=True)):
        resp = await api_client.patch(
            f"/api/v1/promotions/{promotion.id}", json={"discount_value": 120}
        )
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_toggle_promotion(api_client: AsyncClient, db):
    promotion = make_mock_promotion(is_active=False)
    db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

    with patch("app.api.v1.promotions.can_edit", AsyncMock(return_value=True)):
        resp = await api_client.patch(
            f"/api/v1/promotions/{promotion.id}/active", json={"is_active": False}
        )
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False


@pytest.mark.anyio
async def test_delete_already_deleted_promotion(api_client: AsyncClient, db, list_events):
    """DELETE of a row that is already gone answers 204 without the edit check."""
    db.execute = AsyncMock(return_value=mock_scalar_result(None))

    resp = await api_client.delete(f"/api/v1/promotions/{uuid.uuid4()}")
    assert resp.status_code == 204
    assert list_events == []


@pytest.mark.anyio
async def test_creator_deletes_promotion(api_client: AsyncClient, db, admin, list_events):
    promotion = make_mock_promotion(created_by_id=admin.id)
    db.execute = AsyncMock(
        side_effect=[
            mock_scalar_result(promotion),
            mock_scalar_result(admin.id),
            mock_scalar_result(promotion),
        ]
    )

    resp = await api_client.delete(f"/api/v1/promotions/{promotion.id}")
    assert resp.status_code == 204
    assert len(list_events) == 1


@pytest.mark.anyio
async def test_delete_someone_elses_promotion(api_client: AsyncClient, db, list_events):
    promotion = make_mock_promotion()
    db.execute = AsyncMock(
        side_effect=[mock_scalar_result(promotion), mock_scalar_result(promotion.created_by_id)]
    )

    resp = await api_client.delete(f"/api/v1/promotions/{promotion.id}")
    assert resp.status_code == 404
    assert list_events == []


@pytest.mark.anyio
async def test_code_lookup_usage_limit_reached(api_client: AsyncClient, db):
    promotion = make_mock_promotion(usage_limit=5, usage_count=5)
    db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

    resp = await api_client.get("/api/v1/promotions/code/spring20")
    assert resp.status_code == 409


@pytest.mark.anyio
async def test_code_lookup_invalid(api_client: AsyncClient, db):
    db.execute = AsyncMock(return_value=mock_scalar_result(None))

    resp = await api_client.get("/api/v1/promotions/code/NOPE")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_usage_history(api_client: AsyncClient, db):
    promotion_id = uuid.uuid4()
    usage = [make_mock_usage(promotion_id=promotion_id)]
    db.execute = AsyncMock(return_value=mock_scalars_result(usage))

    resp = await api_client.get(f"/api/v1/promotions/{promotion_id}/usage")
    assert resp.status_code == 200
    assert resp.json()[0]["promotion_id"] == str(promotion_id)


@pytest.mark.anyio
async def test_promotions_require_authentication(anonymous_client: AsyncClient):
    resp = await anonymous_client.get("/api/v1/promotions")
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_update_rejects_null_for_required_column(api_client: AsyncClient, db):
    """PATCH with title or discount_value set to null is a request error, not a 503."""
    for body in ({"title": None}, {"discount_value": None}):
        resp = await api_client.patch(f"/api/v1/promotions/{uuid.uuid4()}", json=body)
        assert resp.status_code == 422
    db.execute.assert_not_called()


@pytest.mark.anyio
async def test_update_clears_nullable_column(api_client: AsyncClient, db):
    promotion = make_mock_promotion(description=None, show_on_homepage=False)
    db.execute = AsyncMock(return_value=mock_scalar_result(promotion))

    with patch("app.api.v1.promotions.can_edit", AsyncMock(return_value=True)):
        resp = await api_client.patch(
            f"/api/v1/promotions/{promotion.id}", json={"description": None}
        )
    assert resp.status_code == 200
    assert resp.json()["description"] is None
