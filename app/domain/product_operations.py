from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product import Product

SEARCH_LIMIT = 10
MIN_QUERY_LENGTH = 2
LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Make `%` and `_` in user input match literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class ProductOperations:
    """Read-only catalog lookups for linking a promotion to a product."""

    async def search(
        self,
        db: AsyncSession,
        query: str,
        limit: int = SEARCH_LIMIT,
    ) -> list[Product]:
        """Products whose name or category contains the query, case-insensitively."""
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        pattern = f"%{escape_like(query)}%"
        statement = (
            select(Product)
            .where(
                or_(
                    Product.name.ilike(pattern, escape=LIKE_ESCAPE),  # type: ignore[attr-defined]
                    Product.category.ilike(pattern, escape=LIKE_ESCAPE),  # type: ignore[union-attr]
                )
            )
            .order_by(Product.name)
            .limit(min(limit, SEARCH_LIMIT))
        )
        result = await db.execute(statement)
        return list(result.scalars().all())


product_ops = ProductOperations()
