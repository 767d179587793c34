# storefront/routers/products.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import ProductCreate, ProductRead
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

product_repo = ProductRepository()
cart_repo = CartRepository()
service = ProductService(product_repo, cart_repo)


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    only_in_stock: bool = False,
):
    """
    Public catalog listing with simple pagination.
    """
    return service.list_products(session, skip, limit, only_in_stock)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Catalog lookup used by the cart to refresh name, price, image and stock.
    """
    return service.get_product(session, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a product (admin only).
    """
    return service.create_product(session, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product (admin only).

    409 if any cart still holds it.
    """
    service.delete_product(session, product_id)
