"""Shopping cart, order records and catalog edits."""
from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sporta.errors import AuthError, ValidationError
from sporta.validation import validate_products

Record = Dict[str, Any]

_ORDER_ALPHABET = string.ascii_uppercase + string.digits


def new_order_id() -> str:
    return "ORD-" + "".join(secrets.choice(_ORDER_ALPHABET) for _ in range(9))


class Cart:
    """In-memory cart; lines are product records with a `quantity`."""

    def __init__(self) -> None:
        self._items: List[Record] = []

    @property
    def items(self) -> List[Record]:
        return [dict(i) for i in self._items]

    def add(self, product: Record) -> None:
        for item in self._items:
            if item["id"] == product["id"]:
                item["quantity"] += 1
                return
        self._items.append({**product, "quantity": 1})

    def remove(self, product_id: str) -> None:
        self._items = [i for i in self._items if i["id"] != product_id]

    def clear(self) -> None:
        self._items = []

    @property
    def count(self) -> int:
        return sum(i["quantity"] for i in self._items)

    @property
    def total(self) -> float:
        return round(sum(float(i.get("price", 0)) * i["quantity"] for i in self._items), 2)

    def checkout(self, user: Optional[Record]) -> Record:
        """Build a pending order for `user` and empty the cart."""
        if not user:
            raise AuthError("Please sign in to place an order.")
        if not self._items:
            raise ValidationError("orders: the cart is empty")
        order = {
            "id": new_order_id(),
            "userId": user["id"],
            "items": self.items,
            "total": self.total,
            "status": "Pending",
            "date": datetime.now(timezone.utc).isoformat(),
        }
        self.clear()
        return order


def orders_for_user(orders: Sequence[Record], user_id: str) -> List[Record]:
    return [o for o in orders if o.get("userId") == user_id]


def revenue(orders: Sequence[Record]) -> float:
    return round(sum(float(o.get("total", 0)) for o in orders), 2)


def add_product(products: Sequence[Record], product: Record) -> List[Record]:
    """Newest first; the result goes to a bulk replace of products."""
    validate_products([product])
    if any(p.get("id") == product["id"] for p in products):
        raise ValidationError(f"products: duplicate id '{product['id']}'")
    return [dict(product), *products]


def remove_product(products: Sequence[Record], product_id: str) -> List[Record]:
    return [p for p in products if p.get("id") != product_id]


def filter_catalog(products: Sequence[Record], category: str = "All", search: str = "") -> List[Record]:
    """Products in `category` ("All" for every one) whose name or brand contains `search`."""
    needle = search.strip().lower()
    return [
        p
        for p in products
        if (category == "All" or p.get("category") == category)
        and (needle in str(p.get("name", "")).lower() or needle in str(p.get("brand", "")).lower())
    ]
