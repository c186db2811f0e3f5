"""HTTP cart service adapter — talks to the storefront REST API with requests.

Endpoints (relative to ``base_url``):

    GET    /cart                  → list of cart lines
    POST   /cart                  {productId, quantity, size?}
    DELETE /cart                  {productId, size?, lineId?}
    PUT    /cart/{productId}      {quantity, size?, lineId?}
    GET    /coupon                → active coupon or null
    POST   /coupon/validate       {code, total} → coupon

requests is blocking, so every call runs in a worker thread via
``asyncio.to_thread`` and the event loop stays free while a request is out.
"""

import asyncio
from typing import Any

import requests
import structlog
from pydantic import ValidationError as SchemaValidationError

from storefront.cart.coupon import Coupon
from storefront.cart.line import CartLine
from storefront.service.errors import extract_error_message
from storefront.service.port import CartServiceError, CartServicePort, RemoteNotFound
from storefront.service.schemas import (
    AddToCartRequest,
    UpdateQuantityRequest,
    ValidateCouponRequest,
    parse_cart,
    parse_coupon,
)

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 15.0


class HttpCartService(CartServicePort):
    """Cart service adapter backed by the storefront REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Cookie-based auth: the session carries the login cookies between calls
        self.session = session or requests.Session()
        self.session.headers.setdefault("Content-Type", "application/json")

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _send(self, method: str, path: str, json: dict | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("Cart service request timed out", method=method, url=url)
            raise CartServiceError("Request timed out, please try again") from exc
        except requests.RequestException as exc:
            logger.warning("Cart service unreachable", method=method, url=url, error=str(exc))
            raise CartServiceError("Cannot reach the server, please check your connection") from exc

        if response.status_code >= 400:
            message = extract_error_message(response)
            logger.info(
                "Cart service request failed",
                method=method,
                url=url,
                status_code=response.status_code,
                detail=message,
            )
            error_class = RemoteNotFound if response.status_code == 404 else CartServiceError
            raise error_class(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise CartServiceError("Unexpected response from server", status_code=response.status_code) from exc

    async def _request(self, method: str, path: str, json: dict | None = None) -> Any:
        return await asyncio.to_thread(self._send, method, path, json)

    @staticmethod
    def _line_body(line: CartLine) -> dict:
        body = {"productId": line.product_id}
        if line.selected_size:
            body["size"] = line.selected_size
        if line.item_key != line.product_id:
            body["lineId"] = line.item_key
        return body

    # -------------------------------------------------------------------
    # Port implementation
    # -------------------------------------------------------------------
    async def fetch_cart(self) -> list[CartLine]:
        payload = await self._request("GET", "/cart")
        return parse_cart(payload)

    async def add_item(self, product_id: str, quantity: int = 1, size: str | None = None) -> None:
        body = AddToCartRequest(product_id=product_id, quantity=quantity, size=size)
        await self._request("POST", "/cart", body.model_dump(by_alias=True, exclude_none=True))

    async def remove_item(self, line: CartLine) -> None:
        await self._request("DELETE", "/cart", self._line_body(line))

    async def update_quantity(self, line: CartLine, quantity: int) -> None:
        body = {**UpdateQuantityRequest(quantity=quantity).model_dump(), **self._line_body(line)}
        body.pop("productId")
        await self._request("PUT", f"/cart/{line.product_id}", body)

    async def fetch_coupon(self) -> Coupon | None:
        payload = await self._request("GET", "/coupon")
        try:
            return parse_coupon(payload)
        except SchemaValidationError as exc:
            logger.error("Malformed coupon payload", error=str(exc))
            raise CartServiceError("Unexpected response from server") from exc

    async def validate_coupon(self, code: str, subtotal: float) -> Coupon:
        body = ValidateCouponRequest(code=code, total=subtotal)
        payload = await self._request("POST", "/coupon/validate", body.model_dump())
        try:
            coupon = parse_coupon(payload)
        except SchemaValidationError as exc:
            logger.error("Malformed coupon payload", error=str(exc))
            raise CartServiceError("Unexpected response from server") from exc
        if coupon is None:
            raise CartServiceError("Coupon is not valid")
        return coupon
