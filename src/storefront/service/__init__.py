"""Cart service factory.

Provides get_cart_service() / set_cart_service() to swap implementations:
- HttpCartService against the storefront REST API (default)
- FakeCartService for development and testing

Configured through environment variables:
    CART_SERVICE_ADAPTER   "http" (default) or "fake"
    CART_API_URL           base URL of the REST API
    CART_API_TIMEOUT       request timeout in seconds
"""

import os

from storefront.service.port import CartServiceError, CartServicePort, RemoteNotFound

__all__ = [
    "CartServiceError",
    "CartServicePort",
    "RemoteNotFound",
    "get_cart_service",
    "reset_cart_service",
    "set_cart_service",
]

_current_service: CartServicePort | None = None


def get_cart_service() -> CartServicePort:
    """Return the configured cart service (singleton)."""
    global _current_service
    if _current_service is None:
        adapter = os.environ.get("CART_SERVICE_ADAPTER", "http")
        if adapter == "http":
            from storefront.service.http_adapter import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, HttpCartService

            _current_service = HttpCartService(
                base_url=os.environ.get("CART_API_URL", DEFAULT_BASE_URL),
                timeout=float(os.environ.get("CART_API_TIMEOUT", DEFAULT_TIMEOUT)),
            )
        elif adapter == "fake":
            from storefront.service.fake_adapter import FakeCartService

            _current_service = FakeCartService()
        else:
            raise ValueError(f"Unknown cart service adapter: {adapter}")
    return _current_service


def set_cart_service(service: CartServicePort) -> None:
    """Override the active cart service (useful for tests)."""
    global _current_service
    _current_service = service


def reset_cart_service() -> None:
    """Reset to the configured default."""
    global _current_service
    _current_service = None
