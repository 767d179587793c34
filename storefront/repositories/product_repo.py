# storefront/repositories/product_repo.py
from sqlmodel import Session, select

from storefront.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def get_many(self, session: Session, product_ids: list[int]) -> dict[int, Product]:
        """Fetch several products at once, keyed by id. Missing ids are skipped."""
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {product.id: product for product in session.exec(stmt).all()}

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_in_stock: bool = False,
    ) -> list[Product]:
        stmt = select(Product)
        if only_in_stock:
            stmt = stmt.where(Product.in_stock == True)  # noqa: E712
        stmt = stmt.order_by(Product.id).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
