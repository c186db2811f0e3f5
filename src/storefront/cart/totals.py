"""Cart totals — always derived from the lines and coupon state, never stored."""

from collections.abc import Iterable

from protean.fields import Float

from storefront.cart.coupon import Coupon
from storefront.cart.line import CartLine
from storefront.domain import storefront


@storefront.value_object
class CartTotals:
    subtotal = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)


def compute_totals(
    lines: Iterable[CartLine],
    coupon: Coupon | None,
    coupon_applied: bool,
) -> tuple[CartTotals, bool]:
    """Compute totals for ``lines``.

    Returns the totals and whether the coupon still applies. An applied coupon
    whose minimum amount is no longer met yields ``total == subtotal`` and
    False, telling the caller to deactivate it.
    """
    subtotal = sum(line.line_total for line in lines)

    if coupon is None or not coupon_applied:
        return CartTotals(subtotal=subtotal, total=subtotal), False

    if not coupon.is_eligible(subtotal):
        return CartTotals(subtotal=subtotal, total=subtotal), False

    total = coupon.discounted(subtotal)
    return CartTotals(subtotal=subtotal, discount=subtotal - total, total=total), True
