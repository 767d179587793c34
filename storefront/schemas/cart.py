# storefront/schemas/cart.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from pydantic import Field, field_serializer, model_validator

from storefront.schemas.common import CamelModel, Money
from storefront.services.cart_totals import compute_totals

CENT = Decimal("0.01")


class CartItemCreate(CamelModel):
    """
    Payload for adding to cart. Adds `quantity` on top of what is there.
    """

    product_id: int = Field(gt=0)
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(CamelModel):
    """
    Payload for setting the absolute quantity of a cart line.
    Zero or below removes the line.
    """

    quantity: int


class CartLine(CamelModel):
    """
    A single cart line as the UI sees it (and as the anonymous cart
    persists it).

    `id` mirrors `product_id`; older stored carts may omit it.
    """

    product_id: int = Field(gt=0)
    id: int | None = None
    name: str = "Unknown Product"
    price: Money = Decimal("0")
    image: str | None = None
    quantity: int = Field(ge=1)
    in_stock: bool = False

    @model_validator(mode="after")
    def _mirror_product_id(self) -> "CartLine":
        if self.id is None:
            self.id = self.product_id
        return self


class CartView(CamelModel):
    """
    Full cart with derived totals.

    Always build it through `from_items` (or `empty`) so `total` and
    `item_count` match `items`.
    """

    items: list[CartLine] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    item_count: int = 0

    @field_serializer("total", when_used="json")
    def _round_total(self, total: Decimal) -> float:
        return float(total.quantize(CENT, rounding=ROUND_HALF_UP))

    @classmethod
    def empty(cls) -> "CartView":
        return cls()

    @classmethod
    def from_items(cls, items: Iterable[CartLine]) -> "CartView":
        items = list(items)
        totals = compute_totals(items)
        return cls(items=items, total=totals.total, item_count=totals.item_count)

    def find(self, product_id: int) -> CartLine | None:
        for line in self.items:
            if line.product_id == product_id:
                return line
        return None
