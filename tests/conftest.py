import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import SQLModel, Session  # noqa: E402

from storefront.core.auth import create_access_token  # noqa: E402
from storefront.database import engine  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.models.product import Product  # noqa: E402
from storefront.models.user import User  # noqa: E402


def token_for(user_id: int, email: str | None = None) -> str:
    return create_access_token(user_id, email or f"user{user_id}@example.com")


def bearer(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user_id)}"}


def quantities(cart) -> dict[int, int]:
    """product_id -> quantity, in line order."""
    return {line.product_id: line.quantity for line in cart.items}


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_product(session):
    def _make(name: str = "Espresso Beans", price: str = "12.50", **kwargs) -> Product:
        product = Product(name=name, price=Decimal(price), **kwargs)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def admin_headers(session):
    session.add(User(id=99, email="admin@example.com", name="admin", role="admin"))
    session.commit()
    return {"Authorization": f"Bearer {token_for(99, 'admin@example.com')}"}


@pytest.fixture
def anyio_backend():
    return "asyncio"
