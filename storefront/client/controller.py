# storefront/client/controller.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

import httpx

from storefront.client.local_store import FileStorage, LocalCartStore
from storefront.client.notifications import LoggingNotifier, Notifier
from storefront.client.remote_store import AuthSession, CatalogClient, RemoteCartStore
from storefront.core.config import ClientSettings, get_client_settings
from storefront.core.errors import CartError, CartUnauthenticatedError, CartValidationError
from storefront.schemas.cart import CartLine, CartView
from storefront.schemas.product import ProductRead

logger = logging.getLogger(__name__)

Subscriber = Callable[[CartView], None]


def _check_product_id(product_id) -> int:
    if isinstance(product_id, bool) or not isinstance(product_id, int) or product_id <= 0:
        raise CartValidationError(f"Invalid product id: {product_id!r}")
    return product_id


class CartController:
    """
    The one cart object the UI talks to.

    Anonymous shoppers get a cart kept in local storage; signed-in shoppers
    get their server cart. The UI calls the same async methods either way
    and receives the refreshed cart through `subscribe`.

    On sign-in the local cart is copied into the server cart once, item by
    item with additive quantities, and then cleared. All mutations,
    migration, and refreshes are serialized through one lock, so they apply
    in call order and nothing runs against a half-migrated cart.

    Store failures never escape: they are logged, shown as an error toast,
    and the last known-good cart stays on screen.
    """

    def __init__(
        self,
        local_store: LocalCartStore,
        remote_store: RemoteCartStore,
        catalog: CatalogClient | None = None,
        notifier: Notifier | None = None,
    ):
        self.local_store = local_store
        self.remote_store = remote_store
        self.catalog = catalog
        self.notifier = notifier or LoggingNotifier()

        self._session: AuthSession | None = None
        self._cart = local_store.load()
        self._subscribers: list[Subscriber] = []
        self._lock = asyncio.Lock()

    # ---- view ----

    @property
    def cart(self) -> CartView:
        return self._cart

    @property
    def is_authenticated(self) -> bool:
        """For UI messaging only (e.g. a "guest cart" banner)."""
        return self._session is not None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register `callback` for every cart change. Returns an unsubscribe function.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, cart: CartView) -> None:
        self._cart = cart
        for callback in list(self._subscribers):
            try:
                callback(cart)
            except Exception:
                logger.exception("Cart subscriber failed")

    # ---- auth transitions ----

    async def set_session(self, session: AuthSession | None) -> None:
        """
        Feed the current auth state.

          anonymous -> signed in : migrate the local cart, then load the server cart
          signed in -> anonymous : switch back to the local cart, no migration
          same user, new token   : keep going with the new token
        """
        async with self._lock:
            previous = self._session

            if session is None:
                if previous is not None:
                    logger.info("Signed out; using the local cart")
                    self._fall_back_to_local()
                return

            if previous is not None and previous.user_id == session.user_id:
                self._session = session
                return

            self._session = session
            if previous is None and not await self._migrate(session):
                return
            await self._resync(session)

    async def _migrate(self, session: AuthSession) -> bool:
        """
        Copy every local line into the server cart, in list order.

        One failing line does not stop the others. The local cart is
        cleared afterwards unless the server rejected the session outright,
        in which case we stay anonymous and keep it.
        """
        local = self.local_store.load()
        if not local.items:
            return True

        logger.info(
            "Migrating %d local cart lines for user %s",
            len(local.items),
            session.user_id,
        )
        for line in local.items:
            try:
                await self.remote_store.add_item(session, line.product_id, line.quantity)
            except CartUnauthenticatedError:
                logger.warning("Session rejected during cart migration; keeping the local cart")
                self._fall_back_to_local()
                return False
            except CartError as exc:
                logger.warning("Could not migrate product %s: %s", line.product_id, exc)

        self.local_store.clear()
        return True

    def _fall_back_to_local(self) -> None:
        self._session = None
        self._publish(self.local_store.load())

    async def _resync(self, session: AuthSession) -> None:
        """Re-fetch the server cart; on failure keep what we have."""
        try:
            cart = await self.remote_store.get_cart(session)
        except CartUnauthenticatedError:
            logger.warning("Server cart rejected the session; switching to the local cart")
            self._fall_back_to_local()
            return
        except CartError as exc:
            logger.warning("Could not refresh the server cart: %s", exc)
            return
        self._publish(cart)

    async def _run_remote(
        self,
        operation: Callable[[AuthSession], Awaitable[CartView]],
        failure_message: str,
        local_fallback: Callable[[], bool | None],
    ) -> bool:
        """
        Run one server mutation. Returns True if the change took effect.

        A rejected session drops us to the local cart and applies the change
        there instead; a fallback returning False means nothing changed.
        """
        session = self._session
        try:
            cart = await operation(session)
        except CartUnauthenticatedError:
            logger.warning("Server cart rejected the session; switching to the local cart")
            self._fall_back_to_local()
            return local_fallback() is not False
        except CartError as exc:
            logger.error("%s: %s", failure_message, exc)
            self.notifier.error(failure_message)
            await self._resync(session)
            return False

        self._publish(cart)
        return True

    # ---- public operations ----

    async def add_item(self, product: ProductRead) -> None:
        """Add one unit of `product`, inserting the line if needed."""
        product_id = _check_product_id(product.id)

        async with self._lock:
            if self._session is None:
                self._add_local(product)
            elif not await self._run_remote(
                lambda s: self.remote_store.add_item(s, product_id, 1),
                "Failed to add item to cart",
                lambda: self._add_local(product),
            ):
                return
            self.notifier.success(f"{product.name} added to cart!")

    async def remove_item(self, product_id: int) -> None:
        """Drop the line for `product_id`; absent lines are ignored."""
        product_id = _check_product_id(product_id)

        async with self._lock:
            if self._session is None:
                self._remove_local(product_id)
            elif not await self._run_remote(
                lambda s: self.remote_store.remove_item(s, product_id),
                "Failed to remove item from cart",
                lambda: self._remove_local(product_id),
            ):
                return
            self.notifier.success("Item removed from cart")

    async def update_quantity(self, product_id: int, quantity: int) -> None:
        """
        Set the absolute quantity of a line. Zero or below removes it.

        Unlike add_item this does not add on top of the current quantity.
        """
        product_id = _check_product_id(product_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise CartValidationError(f"Invalid quantity: {quantity!r}")

        if quantity <= 0:
            await self.remove_item(product_id)
            return

        async with self._lock:
            if self._session is None:
                if not self._set_local(product_id, quantity):
                    return
            elif not await self._run_remote(
                lambda s: self.remote_store.set_quantity(s, product_id, quantity),
                "Failed to update cart",
                lambda: self._set_local(product_id, quantity),
            ):
                return
            self.notifier.success("Cart updated")

    async def clear(self) -> None:
        async with self._lock:
            if self._session is None:
                self._clear_local()
            elif not await self._run_remote(
                self.remote_store.clear,
                "Failed to clear cart",
                self._clear_local,
            ):
                return
            self.notifier.success("Cart cleared")

    async def refresh(self) -> None:
        """
        Re-read the active cart.

        Signed in: fetch the server cart. Anonymous: reload local storage
        and refresh names, images, and stock flags from the catalog (prices
        stay as captured).
        """
        async with self._lock:
            if self._session is not None:
                await self._resync(self._session)
                return

            cart = self.local_store.load()
            if self.catalog is not None and cart.items:
                cart = await self._hydrate(cart)
            self._commit_local(cart)

    # ---- local cart ----

    async def _hydrate(self, cart: CartView) -> CartView:
        lines: list[CartLine] = []
        for line in cart.items:
            product = await self.catalog.lookup(line.product_id)
            if product is None:
                lines.append(line)
                continue
            lines.append(
                line.model_copy(
                    update={
                        "name": product.name,
                        "image": product.image,
                        "in_stock": product.in_stock,
                    }
                )
            )
        return CartView.from_items(lines)

    def _commit_local(self, cart: CartView) -> None:
        # Memory is updated even if the write fails; the cart just won't
        # survive a restart.
        self.local_store.save(cart)
        self._publish(cart)

    def _add_local(self, product: ProductRead) -> None:
        lines = [line.model_copy() for line in self._cart.items]
        for line in lines:
            if line.product_id == product.id:
                line.quantity += 1
                break
        else:
            lines.append(
                CartLine(
                    product_id=product.id,
                    id=product.id,
                    name=product.name,
                    price=product.price,
                    image=product.image,
                    quantity=1,
                    in_stock=product.in_stock,
                )
            )
        self._commit_local(CartView.from_items(lines))

    def _remove_local(self, product_id: int) -> None:
        lines = [line for line in self._cart.items if line.product_id != product_id]
        self._commit_local(CartView.from_items(lines))

    def _set_local(self, product_id: int, quantity: int) -> bool:
        if self._cart.find(product_id) is None:
            return False
        lines = [
            line.model_copy(update={"quantity": quantity})
            if line.product_id == product_id
            else line
            for line in self._cart.items
        ]
        self._commit_local(CartView.from_items(lines))
        return True

    def _clear_local(self) -> None:
        self.local_store.clear()
        self._publish(CartView.empty())


@asynccontextmanager
async def open_cart_controller(
    settings: ClientSettings | None = None,
    notifier: Notifier | None = None,
    **client_options,
) -> AsyncIterator[CartController]:
    """
    Build a controller wired to the configured API and local storage.

        async with open_cart_controller() as cart:
            await cart.add_item(product)

    Extra keyword arguments go to httpx.AsyncClient (e.g. transport=...).
    """
    settings = settings or get_client_settings()
    local_store = LocalCartStore(
        FileStorage(settings.LOCAL_STORAGE_DIR), settings.LOCAL_CART_KEY
    )

    async with httpx.AsyncClient(
        base_url=settings.API_URL,
        timeout=settings.CART_REQUEST_TIMEOUT,
        **client_options,
    ) as client:
        yield CartController(
            local_store,
            RemoteCartStore(client),
            CatalogClient(client),
            notifier,
        )
