# storefront/services/cart_totals.py
from decimal import Decimal
from typing import Iterable, NamedTuple, Protocol


class PricedLine(Protocol):
    price: Decimal
    quantity: int


class CartTotals(NamedTuple):
    total: Decimal
    item_count: int


def compute_totals(items: Iterable[PricedLine]) -> CartTotals:
    """
    Derive the cart total and item count from its lines.

    Pure function shared by the local (anonymous) and server carts so both
    modes agree on totals. Arithmetic stays in Decimal; rounding to cents
    happens only when the cart is serialized.
    """
    total = Decimal("0")
    item_count = 0
    for item in items:
        total += item.price * item.quantity
        item_count += item.quantity
    return CartTotals(total=total, item_count=item_count)
