# storefront/models/product.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry the cart hydrates its display fields from.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=100,
        min_length=1,
        index=True,
        description="Display name of the product",
    )

    price: Decimal = Field(
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Current unit price",
    )

    image: str | None = Field(
        default=None,
        description="Main image URL",
    )

    in_stock: bool = Field(
        default=True,
        description="Whether the product can currently be shipped",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
