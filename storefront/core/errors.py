# storefront/core/errors.py
"""
Typed failures raised by the cart client stores.

The controller catches these and decides what the shopper sees; they
never reach the UI layer on their own.
"""


class CartError(Exception):
    """Base class for every cart failure."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CartUnauthenticatedError(CartError):
    """The server rejected the session; the client should use the local cart."""


class CartValidationError(CartError):
    """Bad input (missing product id, non-positive quantity on insert)."""


class CartNotFoundError(CartError):
    """An update targeted a line or product that does not exist."""


class CartConflictError(CartError):
    """The resource is in use and the operation cannot complete."""


class CartTransientError(CartError):
    """Network, timeout, or server-side failure; safe to try again later."""
