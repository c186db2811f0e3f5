"""Configurable fake cart service for development and testing.

Emulates the storefront REST API in memory without any external calls:
products and coupons are registered up front, cart lines follow the server's
rules (adds merge into an existing line, removing an absent line is a 404).
Failures can be configured globally or queued for a single operation, and an
optional latency keeps requests in flight long enough to exercise races.
"""

import asyncio
from dataclasses import dataclass

from storefront.cart.coupon import Coupon
from storefront.cart.line import CartLine, Product, line_key_for
from storefront.service.port import CartServiceError, CartServicePort, RemoteNotFound


@dataclass(frozen=True)
class QueuedFailure:
    status_code: int
    message: str | None


class FakeCartService(CartServicePort):
    """In-memory cart service."""

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self.products: dict[str, Product] = {}
        self.lines: dict[str, CartLine] = {}
        self.coupons: dict[str, Coupon] = {}
        self.active_coupon: Coupon | None = None
        self.calls: list[dict] = []
        self.should_succeed: bool = True
        self.failure_reason: str | None = "Internal server error"
        self.failure_status: int = 500
        self._queued_failures: dict[str, list[QueuedFailure]] = {}

    # -------------------------------------------------------------------
    # Test configuration
    # -------------------------------------------------------------------
    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str | None = "Internal server error",
        failure_status: int = 500,
    ) -> None:
        """Make every operation succeed, or fail with the given status and message."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failure_status = failure_status

    def fail_next(self, operation: str, status_code: int = 500, message: str | None = "Internal server error") -> None:
        """Fail the next call to ``operation`` (e.g. "update_quantity") once."""
        self._queued_failures.setdefault(operation, []).append(QueuedFailure(status_code, message))

    def register_product(self, product: Product) -> Product:
        self.products[product.product_id] = product
        return product

    def register_coupon(self, coupon: Coupon, active: bool = False) -> Coupon:
        self.coupons[coupon.code] = coupon
        if active:
            self.active_coupon = coupon
        return coupon

    def put_line(self, product: Product, quantity: int, size: str | None = None) -> CartLine:
        """Seed a cart line directly, bypassing stock rules."""
        self.register_product(product)
        line = CartLine(
            item_key=line_key_for(product.product_id, size),
            product=product,
            price=product.price,
            quantity=quantity,
            selected_size=size,
        )
        self.lines[line.item_key] = line
        return line

    def calls_to(self, operation: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == operation]

    def reset(self) -> None:
        self.lines.clear()
        self.calls.clear()
        self._queued_failures.clear()
        self.active_coupon = None
        self.configure()

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    async def _enter(self, operation: str, **arguments) -> None:
        self.calls.append({"method": operation, **arguments})
        if self.latency:
            await asyncio.sleep(self.latency)

        queued = self._queued_failures.get(operation)
        if queued:
            failure = queued.pop(0)
            raise self._error(failure.status_code, failure.message)

        if not self.should_succeed:
            raise self._error(self.failure_status, self.failure_reason)

    @staticmethod
    def _error(status_code: int, message: str | None) -> CartServiceError:
        error_class = RemoteNotFound if status_code == 404 else CartServiceError
        return error_class(message, status_code=status_code)

    # -------------------------------------------------------------------
    # Port implementation
    # -------------------------------------------------------------------
    async def fetch_cart(self) -> list[CartLine]:
        await self._enter("fetch_cart")
        return list(self.lines.values())

    async def add_item(self, product_id: str, quantity: int = 1, size: str | None = None) -> None:
        await self._enter("add_item", product_id=product_id, quantity=quantity, size=size)

        product = self.products.get(product_id)
        if product is None:
            raise RemoteNotFound("Product not found", status_code=404)

        key = line_key_for(product_id, size)
        existing = self.lines.get(key)
        if existing is not None:
            self.lines[key] = existing.with_quantity(existing.quantity + quantity)
        else:
            self.lines[key] = CartLine(
                item_key=key,
                product=product,
                price=product.price,
                quantity=quantity,
                selected_size=size,
            )

    async def remove_item(self, line: CartLine) -> None:
        await self._enter("remove_item", item_key=line.item_key)
        if self.lines.pop(line.item_key, None) is None:
            raise RemoteNotFound("Product not found in cart", status_code=404)

    async def update_quantity(self, line: CartLine, quantity: int) -> None:
        await self._enter("update_quantity", item_key=line.item_key, quantity=quantity)
        existing = self.lines.get(line.item_key)
        if existing is None:
            raise RemoteNotFound("Product not found in cart", status_code=404)
        if quantity <= 0:
            del self.lines[line.item_key]
        else:
            self.lines[line.item_key] = existing.with_quantity(quantity)

    async def fetch_coupon(self) -> Coupon | None:
        await self._enter("fetch_coupon")
        return self.active_coupon

    async def validate_coupon(self, code: str, subtotal: float) -> Coupon:
        await self._enter("validate_coupon", code=code, subtotal=subtotal)
        coupon = self.coupons.get(code)
        if coupon is None:
            raise RemoteNotFound("Coupon not found or inactive", status_code=404)
        return coupon
