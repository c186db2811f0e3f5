"""Stock ledger — the per-product inventory shape seen by the storefront.

The cart service reports stock either as a single count (products without
sizes) or as a size → count association. The raw value is resolved once, when
a product is loaded, into one of two explicit ledger types so downstream code
never branches on the wire representation again.
"""

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_INTEGER_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def coerce_count(value: Any) -> int:
    """Coerce a raw stock value to a non-negative integer.

    Numbers are floored, strings are read up to their leading integer
    ("3.7" → 3, "12 left" → 12) and anything unreadable counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return 0
        count = math.floor(value)
    elif isinstance(value, str):
        match = _INTEGER_PREFIX.match(value)
        if match is None:
            return 0
        count = int(match.group(1))
    else:
        return 0

    return max(0, count)


@dataclass(frozen=True)
class ScalarStock:
    """Stock of a product sold without sizes."""

    count: int = 0


@dataclass(frozen=True)
class SizedStock:
    """Stock of a product sold in sizes, one count per size label."""

    sizes: tuple[str, ...]
    counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    def count_for(self, size: str) -> int:
        return self.counts.get(size, 0)


StockLedger = ScalarStock | SizedStock


def _size_entries(raw_stock: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(raw_stock, Mapping):
        return raw_stock.items()
    if isinstance(raw_stock, (list, tuple)):
        entries = []
        for entry in raw_stock:
            if isinstance(entry, Mapping) and "size" in entry:
                entries.append((entry["size"], entry.get("count", entry.get("stock"))))
            elif isinstance(entry, (list, tuple)) and len(entry) == 2:
                entries.append((entry[0], entry[1]))
        return entries
    return ()


def build_stock_ledger(sizes: Iterable[str] | None, raw_stock: Any) -> StockLedger:
    """Resolve a product's raw ``sizes``/``stock`` payload into a ledger.

    ``raw_stock`` for sized products may be a mapping (``{"M": 2}``) or a
    sequence of ``(size, count)`` pairs or ``{"size": ..., "count": ...}``
    records. Counts for sizes outside ``sizes`` are kept; sizes without an
    entry read as 0.
    """
    size_labels = tuple(str(size) for size in (sizes or ()) if size is not None and str(size) != "")

    if not size_labels:
        # Only numeric scalar stock counts; a size map on an unsized product reads as 0
        if isinstance(raw_stock, (int, float)):
            return ScalarStock(count=coerce_count(raw_stock))
        return ScalarStock(count=0)

    counts = {str(size): coerce_count(count) for size, count in _size_entries(raw_stock)}
    return SizedStock(sizes=size_labels, counts=counts)
