"""Catalogue snapshot and cart line — what the store holds for each cart entry."""

from dataclasses import dataclass, replace

from storefront.stock.ledger import ScalarStock, SizedStock, StockLedger


@dataclass(frozen=True)
class Product:
    """A product as loaded from the cart service, with its stock ledger resolved."""

    product_id: str
    name: str = ""
    price: float = 0.0
    stock: StockLedger = ScalarStock()

    @property
    def sizes(self) -> tuple[str, ...]:
        return self.stock.sizes if isinstance(self.stock, SizedStock) else ()

    @property
    def has_sizes(self) -> bool:
        return bool(self.sizes)


def line_key_for(product_id: str, selected_size: str | None = None, line_id: str | None = None) -> str:
    """Key identifying a cart line.

    The server's line id wins. Without one, the product id is the key, suffixed
    with the size so one product in two sizes forms two lines.
    """
    if line_id:
        return str(line_id)
    if selected_size:
        return f"{product_id}-{selected_size}"
    return str(product_id)


@dataclass(frozen=True)
class CartLine:
    item_key: str
    product: Product
    price: float
    quantity: int
    selected_size: str | None = None

    @property
    def product_id(self) -> str:
        return self.product.product_id

    @property
    def stock(self) -> StockLedger:
        return self.product.stock

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)
