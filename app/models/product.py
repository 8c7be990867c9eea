"""Catalog product - read-only here, used to link a promotion to one product."""

import uuid as uuid_pkg

from sqlmodel import Field, SQLModel


class Product(SQLModel, table=True):
    """Storefront product. Owned by the catalog; this service only searches it."""

    __tablename__ = "products"

    id: uuid_pkg.UUID = Field(primary_key=True, nullable=False)
    name: str = Field(max_length=255, nullable=False)
    image_url: str | None = Field(default=None, max_length=500)
    price: float = Field(nullable=False)
    category: str | None = Field(default=None, max_length=100)


class ProductSummary(SQLModel):
    """Schema for linked-product search results."""

    id: uuid_pkg.UUID
    name: str
    image_url: str | None
    price: float
    category: str | None
