"""Pydantic schemas for cart service payloads.

These are external contracts (anti-corruption layer): they accept the
server's JSON field names and hand the store domain objects.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from storefront.cart.coupon import Coupon
from storefront.cart.line import CartLine, Product, line_key_for
from storefront.stock.ledger import build_stock_ledger

logger = structlog.get_logger(__name__)


class ProductSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id", "productId", "product_id"))
    name: str = ""
    price: float = Field(default=0.0, ge=0)
    sizes: list[str] | None = None
    stock: Any = None

    def to_product(self) -> Product:
        return Product(
            product_id=self.id,
            name=self.name,
            price=self.price,
            stock=build_stock_ledger(self.sizes, self.stock),
        )


class CartLineSchema(ProductSchema):
    """A cart line as the server sends it: the product document plus cart fields."""

    quantity: int = Field(default=1, ge=1)
    selected_size: str | None = Field(
        default=None,
        validation_alias=AliasChoices("selectedSize", "selected_size", "size"),
    )
    line_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cartId", "cartItemId", "lineId", "line_id"),
    )

    def to_line(self) -> CartLine:
        return CartLine(
            item_key=line_key_for(self.id, self.selected_size, self.line_id),
            product=self.to_product(),
            price=self.price,
            quantity=self.quantity,
            selected_size=self.selected_size,
        )


class CouponSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str
    discount_percentage: float = Field(validation_alias=AliasChoices("discountPercentage", "discount_percentage"))
    minimum_amount: float = Field(
        default=0.0,
        validation_alias=AliasChoices("minimumAmount", "minimum_amount"),
    )

    def to_coupon(self) -> Coupon:
        return Coupon(
            code=self.code,
            discount_percentage=self.discount_percentage,
            minimum_amount=self.minimum_amount,
        )


class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(serialization_alias="productId")
    quantity: int = Field(default=1, ge=1)
    size: str | None = None


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class ValidateCouponRequest(BaseModel):
    code: str
    total: float = Field(ge=0)


def parse_cart(payload: Any) -> list[CartLine]:
    """Parse a cart payload (a list of lines, or {"cartItems": [...]}).

    Entries without a product or with a non-positive quantity are dropped,
    the same cleanup the server applies before answering. An entry that does
    not validate is logged and dropped; the rest of the cart still loads.
    """
    if isinstance(payload, Mapping):
        payload = payload.get("cartItems", payload.get("items", []))
    if payload is None:
        return []
    if not isinstance(payload, list):
        logger.warning("Unexpected cart payload", payload_type=type(payload).__name__)
        return []

    lines = []
    for index, item in enumerate(payload):
        if not isinstance(item, Mapping) or not item:
            continue
        quantity = item.get("quantity")
        if isinstance(quantity, (int, float)) and quantity <= 0:
            continue
        try:
            lines.append(CartLineSchema.model_validate(item).to_line())
        except ValidationError as exc:
            logger.warning("Dropped malformed cart entry", index=index, errors=exc.errors(include_url=False))
    return lines


def parse_coupon(payload: Any) -> Coupon | None:
    if not payload:
        return None
    return CouponSchema.model_validate(payload).to_coupon()
