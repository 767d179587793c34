# storefront/client/remote_store.py
import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from storefront.core.errors import (
    CartConflictError,
    CartError,
    CartNotFoundError,
    CartTransientError,
    CartUnauthenticatedError,
    CartValidationError,
)
from storefront.schemas.cart import CartView
from storefront.schemas.product import ProductRead

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    """The signed-in shopper as the client sees it."""

    user_id: int
    token: str


def _error_for(response: httpx.Response) -> CartError:
    """
    Translate a non-2xx response into a typed cart failure.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail", body) if isinstance(body, dict) else response.text
    message = f"{response.status_code}: {detail}"

    code = response.status_code
    if code == 401:
        return CartUnauthenticatedError(message, code)
    if code in (400, 422):
        return CartValidationError(message, code)
    if code == 404:
        return CartNotFoundError(message, code)
    if code == 409:
        return CartConflictError(message, code)
    return CartTransientError(message, code)


async def _send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise CartTransientError(f"Request timed out: {method} {url}") from exc
    except httpx.HTTPError as exc:
        raise CartTransientError(f"Request failed: {method} {url}: {exc}") from exc

    if response.is_error:
        raise _error_for(response)
    return response


class RemoteCartStore:
    """
    Client for the server cart API (/cart).

    Every call is a single request bounded by the client's timeout and
    returns the refreshed, hydrated cart.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _cart_request(
        self, session: AuthSession, method: str, url: str, **kwargs
    ) -> CartView:
        headers = {"Authorization": f"Bearer {session.token}"}
        response = await _send(self.client, method, url, headers=headers, **kwargs)
        try:
            cart = CartView.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise CartTransientError(f"Unreadable cart response: {exc}") from exc
        # The server's totals arrive rounded; derive ours from the lines
        return CartView.from_items(cart.items)

    async def get_cart(self, session: AuthSession) -> CartView:
        return await self._cart_request(session, "GET", "/cart")

    async def add_item(
        self, session: AuthSession, product_id: int, quantity: int
    ) -> CartView:
        return await self._cart_request(
            session,
            "POST",
            "/cart",
            json={"productId": product_id, "quantity": quantity},
        )

    async def set_quantity(
        self, session: AuthSession, product_id: int, quantity: int
    ) -> CartView:
        return await self._cart_request(
            session, "PATCH", f"/cart/{product_id}", json={"quantity": quantity}
        )

    async def remove_item(self, session: AuthSession, product_id: int) -> CartView:
        return await self._cart_request(session, "DELETE", f"/cart/{product_id}")

    async def clear(self, session: AuthSession) -> CartView:
        return await self._cart_request(session, "DELETE", "/cart")


class CatalogClient:
    """
    Product lookups for refreshing cart display fields.

    Lookups never raise; a failed lookup returns None and the cart keeps
    whatever it last knew about the product.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def lookup(self, product_id: int) -> ProductRead | None:
        try:
            response = await _send(self.client, "GET", f"/products/{product_id}")
            return ProductRead.model_validate(response.json())
        except (CartError, ValueError, ValidationError) as exc:
            logger.warning("Catalog lookup failed for product %s: %s", product_id, exc)
            return None
