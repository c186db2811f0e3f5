"""Cart store — the session's single in-memory cart.

Owns the cart lines, the coupon and the derived totals for one customer
session. Every mutation goes through this class: it validates changes against
the stock resolver, applies them locally first so the UI responds at once,
and keeps local state reconciled with the cart service. When a write the
client already applied fails, the cart is refetched from the server.

The store is an explicit object built once per session (see
``storefront.session``) and reset on logout; nothing here is module-global,
so tests can run isolated stores side by side.

No operation raises to the caller on remote failure. Failures become notices
on the injected notifier plus refreshed state.
"""

from functools import partial

import structlog
from protean.exceptions import ValidationError

from storefront.cart.coupon import Coupon
from storefront.cart.line import CartLine, Product
from storefront.cart.operations import GENERIC_FAILURE_MESSAGE, OptimisticOperation, run_optimistic
from storefront.cart.totals import CartTotals, compute_totals
from storefront.notify.port import NotifierPort
from storefront.service.port import CartServiceError, CartServicePort
from storefront.stock.resolver import resolve_available_stock, validate_requested_quantity
from storefront.sync.scheduler import DEFAULT_DELAY, DebouncedSyncScheduler

logger = structlog.get_logger(__name__)


def _format_amount(amount: float) -> str:
    return f"{amount:.2f}".rstrip("0").rstrip(".")


class CartStore:
    def __init__(
        self,
        service: CartServicePort,
        notifier: NotifierPort,
        *,
        sync_delay: float = DEFAULT_DELAY,
    ) -> None:
        self._service = service
        self._notifier = notifier
        self._lines: list[CartLine] = []
        self._coupon: Coupon | None = None
        self._coupon_applied = False
        self._totals = CartTotals()
        self._scheduler: DebouncedSyncScheduler[CartLine] = DebouncedSyncScheduler(
            self._write_quantity, delay=sync_delay
        )

    # -------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------
    @property
    def cart(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def totals(self) -> CartTotals:
        return self._totals

    @property
    def subtotal(self) -> float:
        return self._totals.subtotal

    @property
    def total(self) -> float:
        return self._totals.total

    @property
    def coupon(self) -> Coupon | None:
        return self._coupon

    @property
    def is_coupon_applied(self) -> bool:
        return self._coupon_applied

    @property
    def scheduler(self) -> DebouncedSyncScheduler[CartLine]:
        return self._scheduler

    @property
    def pending_writes(self) -> tuple[str, ...]:
        return self._scheduler.pending_keys

    def line(self, item_key: str) -> CartLine | None:
        return next((line for line in self._lines if line.item_key == item_key), None)

    def _line_for(self, product_id: str, size: str | None) -> CartLine | None:
        return next(
            (line for line in self._lines if line.product_id == product_id and line.selected_size == size),
            None,
        )

    # -------------------------------------------------------------------
    # Local state transitions
    # -------------------------------------------------------------------
    def _recalculate(self) -> None:
        totals, coupon_applies = compute_totals(self._lines, self._coupon, self._coupon_applied)

        if self._coupon_applied and not coupon_applies:
            # Coupon stays stored, only deactivated; it can be re-applied later
            self._coupon_applied = False
            logger.info(
                "Coupon deactivated, minimum amount no longer met",
                coupon_code=self._coupon.code,
                subtotal=totals.subtotal,
                minimum_amount=self._coupon.minimum_amount,
            )
            self._notifier.warning(
                f"Cart total must be at least ${_format_amount(self._coupon.minimum_amount)} to use this coupon"
            )

        self._totals = totals

    def _replace_lines(self, lines: list[CartLine]) -> None:
        # A pending write is the user's latest intent for that line; keep it
        pending = set(self._scheduler.pending_keys)
        if pending:
            local = {line.item_key: line for line in self._lines if line.item_key in pending}
            lines = [
                line.with_quantity(local[line.item_key].quantity) if line.item_key in local else line
                for line in lines
            ]
        self._lines = list(lines)
        self._recalculate()

    def _drop_line(self, item_key: str) -> None:
        self._lines = [line for line in self._lines if line.item_key != item_key]
        self._recalculate()

    def _set_line_quantity(self, item_key: str, quantity: int) -> None:
        self._lines = [line.with_quantity(quantity) if line.item_key == item_key else line for line in self._lines]
        self._recalculate()

    # -------------------------------------------------------------------
    # Server sync
    # -------------------------------------------------------------------
    async def get_cart_items(self) -> None:
        """Rebuild the cart wholesale from the server."""
        try:
            lines = await self._service.fetch_cart()
        except CartServiceError as exc:
            logger.warning("Cart refresh failed", status_code=exc.status_code, detail=exc.message)
            self._lines = []
            self._recalculate()
            self._notifier.error(exc.message or GENERIC_FAILURE_MESSAGE)
            return

        self._replace_lines(lines)
        logger.debug("Cart refreshed", line_count=len(self._lines), subtotal=self.subtotal)

    async def get_my_coupon(self) -> Coupon | None:
        """Load the customer's active coupon (it is offered, not applied)."""
        try:
            coupon = await self._service.fetch_coupon()
        except (CartServiceError, ValidationError) as exc:
            logger.warning("Active coupon fetch failed", error=str(exc))
            self._notifier.error(getattr(exc, "message", None) or "Failed to load your coupon")
            return None

        if not self._coupon_applied:
            self._coupon = coupon
        return coupon

    async def load(self) -> None:
        """Initial load for a new session: cart lines, then the active coupon."""
        await self.get_cart_items()
        await self.get_my_coupon()

    # -------------------------------------------------------------------
    # Adding and removing
    # -------------------------------------------------------------------
    async def add_to_cart(self, product: Product, selected_size: str | None = None, quantity: int = 1) -> bool:
        """Add ``quantity`` units of a product to the cart.

        The quantity the line would reach is checked against stock before any
        request is made. On success the cart is refetched rather than patched
        locally, since the server may price or bucket the line differently.
        """
        check = validate_requested_quantity(product, selected_size, quantity)
        existing = self._line_for(product.product_id, selected_size)
        if check.is_valid and existing is not None:
            check = validate_requested_quantity(product, selected_size, existing.quantity + quantity)

        if not check.is_valid:
            logger.info(
                "Add to cart blocked",
                product_id=product.product_id,
                size=selected_size,
                quantity=quantity,
                available=check.available_stock,
            )
            self._notifier.error(check.message)
            return False

        try:
            await self._service.add_item(product.product_id, quantity, selected_size)
        except CartServiceError as exc:
            logger.warning("Add to cart failed", product_id=product.product_id, status_code=exc.status_code)
            self._notifier.error(exc.message or GENERIC_FAILURE_MESSAGE)
            return False

        self._notifier.success("Product added to cart")
        await self.get_cart_items()
        return True

    async def remove_from_cart(self, item_key: str) -> bool:
        """Drop a line locally, then delete it server-side.

        A 404 means the line is already gone and is not reported.
        """
        line = self.line(item_key)
        if line is None:
            logger.info("Remove ignored, line not in cart", item_key=item_key)
            return False

        operation = OptimisticOperation(
            name="remove_from_cart",
            apply=partial(self._drop_line, item_key),
            commit=partial(self._service.remove_item, line),
            tolerate_not_found=True,
            failure_message="Failed to remove item",
        )
        return await run_optimistic(operation, self._notifier, self.get_cart_items)

    # -------------------------------------------------------------------
    # Quantities
    # -------------------------------------------------------------------
    async def change_quantity(self, item_key: str, delta: int) -> bool:
        """Step a line's quantity by ``delta`` (the +/- controls).

        Reaching zero removes the line. Increases are checked against stock and
        blocked with the resolver's message; decreases always go through.
        """
        line = self.line(item_key)
        if line is None:
            return False

        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            return await self.remove_from_cart(item_key)

        if delta > 0:
            check = validate_requested_quantity(line, line.selected_size, new_quantity)
            if not check.is_valid:
                self._notifier.error(check.message)
                return False
            return self.update_quantity_optimistic(item_key, new_quantity) is not None

        self._set_line_quantity(item_key, new_quantity)
        self.schedule_quantity_write(item_key, new_quantity)
        return True

    def update_quantity_optimistic(self, item_key: str, quantity: int) -> int | None:
        """Set a line's quantity locally at once and queue the remote write.

        A value above available stock is clamped to the stock (never below 1)
        with a notice; the clamped value is what gets written. Returns the
        quantity applied, or None if the line is not in the cart.
        """
        line = self.line(item_key)
        if line is None:
            logger.info("Quantity update ignored, line not in cart", item_key=item_key)
            return None

        applied = max(1, quantity)
        available = resolve_available_stock(line, line.selected_size)
        if available is not None and applied > available:
            applied = max(1, available)
            logger.info("Quantity clamped to stock", item_key=item_key, requested=quantity, applied=applied)
            self._notifier.warning(f"Quantity adjusted to {applied} (only {available} available)")

        self._set_line_quantity(item_key, applied)
        self.schedule_quantity_write(item_key, applied)
        return applied

    async def update_quantity(self, item_key: str, quantity: int) -> int | None:
        """Authoritative quantity set: zero or less removes the line."""
        if quantity <= 0:
            await self.remove_from_cart(item_key)
            return 0
        return self.update_quantity_optimistic(item_key, quantity)

    def schedule_quantity_write(self, item_key: str, quantity: int) -> None:
        """Queue a debounced remote write of ``quantity`` for the line."""
        line = self.line(item_key)
        if line is None:
            return
        self._scheduler.schedule(item_key, line.with_quantity(quantity))

    async def _write_quantity(self, item_key: str, line: CartLine) -> None:
        operation = OptimisticOperation(
            name="update_quantity",
            commit=partial(self._service.update_quantity, line, line.quantity),
            tolerate_not_found=True,
            target_exists=lambda: self.line(item_key) is not None,
            failure_message="Failed to update quantity",
        )
        if await run_optimistic(operation, self._notifier, self.get_cart_items):
            logger.debug("Quantity synced", item_key=item_key, quantity=line.quantity)

    # -------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------
    async def apply_coupon(self, code: str) -> bool:
        try:
            coupon = await self._service.validate_coupon(code, self.subtotal)
        except CartServiceError as exc:
            logger.info("Coupon rejected", coupon_code=code, status_code=exc.status_code, detail=exc.message)
            self._notifier.error(exc.message or "Failed to apply coupon")
            return False
        except ValidationError as exc:
            logger.warning("Coupon payload invalid", coupon_code=code, errors=exc.messages)
            self._notifier.error("Failed to apply coupon")
            return False

        self._coupon = coupon
        self._coupon_applied = True
        self._recalculate()

        if self._coupon_applied:
            self._notifier.success("Coupon applied successfully")
        return self._coupon_applied

    def remove_coupon(self) -> None:
        self._coupon = None
        self._coupon_applied = False
        self._recalculate()
        self._notifier.success("Coupon removed")

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def clear_cart(self) -> None:
        """Empty the local cart (after checkout); pending quantity writes are dropped."""
        self._scheduler.cancel_all()
        self._lines = []
        self._coupon = None
        self._coupon_applied = False
        self._totals = CartTotals()

    def reset(self) -> None:
        """Forget everything for this session (logout)."""
        self.clear_cart()
        logger.info("Cart store reset")

    async def flush(self) -> None:
        """Send every pending quantity write now (page unload, explicit save)."""
        await self._scheduler.flush_all()

    async def aclose(self) -> None:
        await self.flush()
