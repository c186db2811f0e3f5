"""Cart session — builds, loads and tears down the store for one customer session.

Usage:
    async with cart_session() as store:
        await store.add_to_cart(product, selected_size="M")
        store.update_quantity_optimistic(store.cart[0].item_key, 3)

On exit, pending quantity writes are flushed so nothing the customer changed
is lost when the page goes away. On logout, call ``store.reset()``.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

from storefront.cart.store import CartStore
from storefront.domain import storefront
from storefront.notify import get_notifier
from storefront.notify.port import NotifierPort
from storefront.service import get_cart_service
from storefront.service.port import CartServicePort
from storefront.sync.scheduler import DEFAULT_DELAY
from storefront.utils.logging import bind_session, clear_session, get_logger

logger = get_logger(__name__)

_domain_initialized = False


def configured_sync_delay() -> float:
    """Debounce window in seconds, from CART_SYNC_DELAY_MS (default 500 ms)."""
    raw = os.environ.get("CART_SYNC_DELAY_MS")
    if raw is None:
        return DEFAULT_DELAY
    return float(raw) / 1000


def _ensure_domain() -> None:
    global _domain_initialized
    if not _domain_initialized:
        storefront.init(traverse=False)
        _domain_initialized = True


@asynccontextmanager
async def cart_session(
    service: CartServicePort | None = None,
    notifier: NotifierPort | None = None,
    *,
    sync_delay: float | None = None,
    load: bool = True,
) -> AsyncIterator[CartStore]:
    """Open a cart session: a fresh store, loaded from the server."""
    _ensure_domain()
    bind_session(cart_session_id=uuid4().hex)

    with storefront.domain_context():
        store = CartStore(
            service or get_cart_service(),
            notifier or get_notifier(),
            sync_delay=configured_sync_delay() if sync_delay is None else sync_delay,
        )
        if load:
            await store.load()
        logger.info("Cart session opened", line_count=len(store.cart))
        try:
            yield store
        finally:
            await store.aclose()
            logger.info("Cart session closed")
            clear_session()
