# storefront/schemas/product.py
from datetime import datetime
from decimal import Decimal

from pydantic import Field

from storefront.schemas.common import CamelModel, Money


class ProductCreate(CamelModel):
    """
    Payload for creating a catalog product (admin only).
    """

    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image: str | None = None
    in_stock: bool = True


class ProductRead(CamelModel):
    """
    Catalog data the cart needs: price plus display fields.
    """

    id: int
    name: str
    price: Money
    image: str | None = None
    in_stock: bool = True
    created_at: datetime | None = None
