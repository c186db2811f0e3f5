"""Optimistic operations — apply locally, commit remotely, reconcile on failure.

Every store mutation that changes local state before the server confirms it
has the same three phases:

1. ``apply``  — mutate local state synchronously (the UI sees it at once)
2. ``commit`` — send the change to the cart service
3. on commit failure — surface the error and invalidate local state by
   refetching the cart from the server

A not-found answer can be declared benign (the change the client wanted is
already true server-side, e.g. removing a line that is already gone).
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from storefront.notify.port import NotifierPort
from storefront.service.port import CartServiceError, RemoteNotFound

logger = structlog.get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "An error occurred"


@dataclass(frozen=True)
class OptimisticOperation:
    name: str
    commit: Callable[[], Awaitable[None]]
    apply: Callable[[], None] | None = None
    tolerate_not_found: bool = False
    # When set, a not-found answer is only benign if the target is gone locally too
    target_exists: Callable[[], bool] | None = None
    failure_message: str = GENERIC_FAILURE_MESSAGE


async def run_optimistic(
    operation: OptimisticOperation,
    notifier: NotifierPort,
    on_failure: Callable[[], Awaitable[None]],
) -> bool:
    """Run ``operation`` through its phases. Returns True if the commit landed.

    ``on_failure`` is the invalidation step, normally a full cart refetch.
    """
    if operation.apply is not None:
        operation.apply()

    try:
        await operation.commit()
    except CartServiceError as exc:
        if isinstance(exc, RemoteNotFound) and operation.tolerate_not_found:
            if operation.target_exists is None or not operation.target_exists():
                logger.info("Target already gone server-side", operation=operation.name, detail=exc.message)
                return True

            logger.warning("Target missing server-side, refetching", operation=operation.name)
            await on_failure()
            return False

        logger.warning("Optimistic commit failed", operation=operation.name, status_code=exc.status_code)
        notifier.error(exc.message or operation.failure_message)
        await on_failure()
        return False

    return True
