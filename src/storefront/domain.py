"""Storefront bounded context — cart, coupons and stock consistency.

Holds the client-side view of a customer's cart. The authoritative cart lives
behind the REST cart service; this context mirrors it, validates changes
against product stock and keeps local state reconciled with the server.
"""

import os

from protean.domain import Domain

from storefront.utils.logging import configure_logging

# Configure logging for the application
configure_logging(log_dir=os.getenv("LOG_DIR", "logs"))

# Domain Composition Root
storefront = Domain(name="storefront")
