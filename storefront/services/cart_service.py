# storefront/services/cart_service.py
import logging
from decimal import Decimal

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartItemCreate, CartLine, CartView

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for the server-side (authenticated) cart.

    Responsibilities:
      - find-or-create one cart per user
      - additive adds, absolute quantity updates, removals, clearing
      - snapshot the catalog price when a product first enters the cart
      - hydrate every returned cart with live catalog display fields
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_product(self, session: Session, product_id: int) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def _build_view(self, session: Session, cart: Cart) -> CartView:
        """
        Join cart lines with the catalog.

        Price precedence: snapshot on the line, else catalog price, else 0.
        Lines whose product has gone away keep their snapshot and show as
        an unknown, out-of-stock product.
        """
        items: list[CartItem] = self.cart_repo.list_items(session, cart.id)
        products = self.product_repo.get_many(
            session, [item.product_id for item in items]
        )

        lines: list[CartLine] = []
        for item in items:
            product = products.get(item.product_id)
            if item.price is not None:
                price = item.price
            elif product is not None:
                price = product.price
            else:
                price = Decimal("0")

            lines.append(
                CartLine(
                    product_id=item.product_id,
                    id=item.product_id,
                    name=product.name if product else "Unknown Product",
                    price=price,
                    image=product.image if product else None,
                    quantity=item.quantity,
                    in_stock=product.in_stock if product else False,
                )
            )

        return CartView.from_items(lines)

    # ---- public operations ----

    def get_or_create(self, session: Session, user_id: int) -> CartView:
        """
        Return the user's cart, creating an empty one on first access.
        """
        cart = self.cart_repo.get_or_create(session, user_id)
        return self._build_view(session, cart)

    def add_item(
        self,
        session: Session,
        user_id: int,
        payload: CartItemCreate,
    ) -> CartView:
        """
        Add a product to the user's cart.

        Rules:
          - product must exist
          - an existing line is incremented by payload.quantity
          - a new line snapshots the current product price
        """
        product = self._get_product(session, payload.product_id)
        cart = self.cart_repo.get_or_create(session, user_id)

        self.cart_repo.increment_item(
            session,
            cart_id=cart.id,
            product_id=product.id,
            quantity=payload.quantity,
            price=product.price,
        )
        logger.info(
            "Cart %s: +%s of product %s", cart.id, payload.quantity, product.id
        )
        return self._build_view(session, cart)

    def set_quantity(
        self,
        session: Session,
        user_id: int,
        product_id: int,
        quantity: int,
    ) -> CartView:
        """
        Set the absolute quantity of a line already in the cart.

        quantity <= 0 removes the line (no-op when absent).
        Updating a line that is not in the cart => 404.
        """
        cart = self.cart_repo.get_or_create(session, user_id)

        if quantity <= 0:
            self.cart_repo.delete_item(session, cart.id, product_id)
            return self._build_view(session, cart)

        if not self.cart_repo.set_quantity(session, cart.id, product_id, quantity):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )

        return self._build_view(session, cart)

    def remove_item(
        self,
        session: Session,
        user_id: int,
        product_id: int,
    ) -> CartView:
        """
        Remove a product from the cart if present, and return the cart.
        """
        cart = self.cart_repo.get_or_create(session, user_id)
        self.cart_repo.delete_item(session, cart.id, product_id)
        return self._build_view(session, cart)

    def clear(
        self,
        session: Session,
        user_id: int,
    ) -> CartView:
        """
        Delete every line; the cart row itself stays.
        """
        cart = self.cart_repo.get_or_create(session, user_id)
        self.cart_repo.clear_items(session, cart.id)
        return CartView.empty()
