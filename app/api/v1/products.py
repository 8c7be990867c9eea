"""Linked-product lookup for the promotion wizard's Product Link step."""

from fastapi import APIRouter, Query

from app.api.deps import CurrentAdmin, RlsSession
from app.core.rate_limit import PRODUCT_SEARCH_LIMIT, rate_limiter
from app.domain import product_ops
from app.models.product import Product, ProductSummary

router = APIRouter(prefix="/products", tags=["products"])


def _serialize_product(product: Product) -> dict:
    return ProductSummary.model_validate(product, from_attributes=True).model_dump(mode="json")


@router.get("/search", response_model=list[dict])
async def search_products(
    current_admin: CurrentAdmin,
    db: RlsSession,
    q: str = Query("", description="Name or category text, at least 2 characters"),
):
    """Up to 10 products whose name or category contains the query."""
    rate_limiter.check_rate_limit(current_admin.id, "product_search", PRODUCT_SEARCH_LIMIT)
    products = await product_ops.search(db, q)
    return [_serialize_product(p) for p in products]
