# storefront/repositories/cart_repo.py
from decimal import Decimal

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from storefront.models.cart import Cart, CartItem


class CartRepository:
    """
    Data access layer for carts and cart_items.

    Every mutation is a single statement followed by a commit, so two
    devices writing to the same cart converge instead of overwriting
    each other with stale reads.
    """

    # ----- Carts -----

    def get_by_user(self, session: Session, user_id: int) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def get_or_create(self, session: Session, user_id: int) -> Cart:
        """
        Return the user's cart, creating it on first access.

        A concurrent request may insert the row first; the unique
        constraint on user_id rejects our insert and we read theirs.
        """
        cart = self.get_by_user(session, user_id)
        if cart:
            return cart

        cart = Cart(user_id=user_id)
        session.add(cart)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            existing = self.get_by_user(session, user_id)
            if existing is None:
                raise
            return existing
        session.refresh(cart)
        return cart

    # ----- Items -----

    def list_items(self, session: Session, cart_id: int) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
        return session.exec(stmt).all()

    def increment_item(
        self,
        session: Session,
        *,
        cart_id: int,
        product_id: int,
        quantity: int,
        price: Decimal | None,
    ) -> None:
        """
        Add `quantity` to the line for `product_id`, inserting it if absent.

        The increment is done in SQL (quantity = quantity + n). If the insert
        loses a race with another request, the increment is retried once.
        """
        if self._increment(session, cart_id, product_id, quantity):
            session.commit()
            return

        session.add(
            CartItem(
                cart_id=cart_id,
                product_id=product_id,
                quantity=quantity,
                price=price,
            )
        )
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            if not self._increment(session, cart_id, product_id, quantity):
                raise
            session.commit()

    def set_quantity(
        self, session: Session, cart_id: int, product_id: int, quantity: int
    ) -> bool:
        """
        Overwrite the quantity of an existing line.
        Returns False when the cart has no line for `product_id`.
        """
        stmt = (
            update(CartItem)
            .where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            .values(quantity=quantity)
        )
        result = session.execute(stmt)
        session.commit()
        return result.rowcount > 0

    def delete_item(self, session: Session, cart_id: int, product_id: int) -> bool:
        stmt = delete(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.product_id == product_id
        )
        result = session.execute(stmt)
        session.commit()
        return result.rowcount > 0

    def clear_items(self, session: Session, cart_id: int) -> None:
        session.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
        session.commit()

    def count_lines_for_product(self, session: Session, product_id: int) -> int:
        stmt = select(func.count()).select_from(CartItem).where(
            CartItem.product_id == product_id
        )
        return session.exec(stmt).one()

    # ----- helpers -----

    def _increment(
        self, session: Session, cart_id: int, product_id: int, quantity: int
    ) -> bool:
        stmt = (
            update(CartItem)
            .where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            .values(quantity=CartItem.quantity + quantity)
        )
        return session.execute(stmt).rowcount > 0
