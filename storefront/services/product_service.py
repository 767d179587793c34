# storefront/services/product_service.py
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import ProductCreate


class ProductService:
    """
    Thin catalog logic: lookups for cart hydration, plus admin create/delete.
    """

    def __init__(self, product_repo: ProductRepository, cart_repo: CartRepository):
        self.product_repo = product_repo
        self.cart_repo = cart_repo

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_in_stock: bool = False,
    ) -> list[Product]:
        return self.product_repo.list(session, skip, limit, only_in_stock)

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(**payload.model_dump())
        return self.product_repo.create(session, product)

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product.

        Products still sitting in someone's cart cannot be deleted => 409.
        """
        product = self.get_product(session, product_id)

        if self.cart_repo.count_lines_for_product(session, product_id) > 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product is in use by one or more carts",
            )

        try:
            self.product_repo.delete(session, product)
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product is in use by one or more carts",
            )
