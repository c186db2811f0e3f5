"""Cart service port (abstract interface).

Defines the contract the storefront needs from the remote cart/coupon
service. The store programs against the port; adapters (HTTP, in-memory fake)
are swapped via configuration.
"""

from abc import ABC, abstractmethod

from storefront.cart.coupon import Coupon
from storefront.cart.line import CartLine


class CartServiceError(Exception):
    """A cart service call failed.

    ``message`` is the server's own explanation when it sent one, else None.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message or f"Cart service request failed (status {status_code})")
        self.message = message
        self.status_code = status_code


class RemoteNotFound(CartServiceError):
    """The targeted cart line (or coupon) does not exist server-side."""


class CartServicePort(ABC):
    """Abstract cart/coupon service interface."""

    @abstractmethod
    async def fetch_cart(self) -> list[CartLine]:
        """Return the customer's cart lines in server order."""
        ...

    @abstractmethod
    async def add_item(self, product_id: str, quantity: int = 1, size: str | None = None) -> None:
        """Add ``quantity`` units of a product (and size) to the cart."""
        ...

    @abstractmethod
    async def remove_item(self, line: CartLine) -> None:
        """Remove a cart line. Raises RemoteNotFound when it is already gone."""
        ...

    @abstractmethod
    async def update_quantity(self, line: CartLine, quantity: int) -> None:
        """Set a cart line's quantity. Raises RemoteNotFound when the line is gone."""
        ...

    @abstractmethod
    async def fetch_coupon(self) -> Coupon | None:
        """Return the customer's active coupon, if any."""
        ...

    @abstractmethod
    async def validate_coupon(self, code: str, subtotal: float) -> Coupon:
        """Validate a coupon code against the current subtotal and return it."""
        ...
