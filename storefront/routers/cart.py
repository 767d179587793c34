# storefront/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_auth
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartView, CartItemCreate, CartItemUpdate
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartView)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get the current user's cart, creating it on first access.
    """
    return service.get_or_create(session, current_user.id)


@router.post("", response_model=CartView)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Add `quantity` of a product to the current user's cart.

    Returns the updated cart.
    """
    return service.add_item(session, current_user.id, payload)


@router.patch("/{product_id}", response_model=CartView)
def update_cart_item(
    product_id: int,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set the quantity of a product already in the cart.
    Zero or below removes it.

    Returns the updated cart.
    """
    return service.set_quantity(
        session=session,
        user_id=current_user.id,
        product_id=product_id,
        quantity=payload.quantity,
    )


@router.delete("/{product_id}", response_model=CartView)
def remove_cart_item(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Remove a product from the cart. Absent products are ignored.

    Returns the updated cart.
    """
    return service.remove_item(session, current_user.id, product_id)


@router.delete("", response_model=CartView)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Clear the entire cart.

    Returns an empty cart.
    """
    return service.clear(session, current_user.id)
