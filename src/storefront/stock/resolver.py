"""Stock resolver — available stock and quantity checks for a product/size pair.

Pure functions over a product's stock ledger. The cart, product pages and any
add-to-cart guard all go through these so they compute the same numbers from
the same ledger.

Anything exposing a ``stock`` ledger is accepted: a ``Product`` or a
``CartLine`` (which carries its product's ledger).
"""

from dataclasses import dataclass
from typing import Protocol

from storefront.stock.ledger import SizedStock, StockLedger

LOW_STOCK_THRESHOLD = 5


class Stocked(Protocol):
    @property
    def stock(self) -> StockLedger: ...


@dataclass(frozen=True)
class StockCheck:
    """Outcome of validating a requested quantity against available stock."""

    is_valid: bool
    available_stock: int
    message: str = ""


def _size_suffix(size: str | None) -> str:
    return f" for size {size}" if size else ""


def resolve_available_stock(product: Stocked, size: str | None = None) -> int | None:
    """Return how many units of ``size`` of ``product`` are available.

    Returns None when the product is sold in sizes and no size was given. That
    is "size not chosen yet", not "out of stock".
    """
    ledger = product.stock
    if isinstance(ledger, SizedStock):
        if not size:
            return None
        return ledger.count_for(size)
    return ledger.count


def validate_requested_quantity(product: Stocked, size: str | None, quantity: int) -> StockCheck:
    """Check whether ``quantity`` units of ``size`` can be put in the cart."""
    available = resolve_available_stock(product, size)

    if available is None:
        return StockCheck(is_valid=False, available_stock=0, message="Please select a size")

    if quantity <= 0:
        return StockCheck(is_valid=False, available_stock=available, message="Quantity must be at least 1")

    if quantity > available:
        return StockCheck(
            is_valid=False,
            available_stock=available,
            message=f"Only {available} item(s) available{_size_suffix(size)}",
        )

    return StockCheck(is_valid=True, available_stock=available)


def is_out_of_stock(product: Stocked, size: str | None = None) -> bool:
    """True only when resolved stock is exactly zero.

    A sized product without a chosen size is indeterminate and reports False;
    callers prompt for a size instead.
    """
    return resolve_available_stock(product, size) == 0


def format_stock_message(available_stock: int, size: str | None = None) -> str:
    """Render a stock badge such as "Only 2 left in stock for size M!"."""
    suffix = _size_suffix(size)
    if available_stock <= 0:
        return f"Out of stock{suffix}"
    if available_stock <= LOW_STOCK_THRESHOLD:
        return f"Only {available_stock} left in stock{suffix}!"
    return f"{available_stock} available{suffix}"
