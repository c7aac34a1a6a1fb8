# app/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Dict, Any, Optional

from app.core.errors import InvalidState

MONEY_QUANTUM = Decimal("0.01")


def _first(d: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Value of the first key present (and not None) in d; older documents use snake_case keys."""
    for key in keys:
        if d.get(key) is not None:
            return d[key]
    return default


def round_money(value: float) -> float:
    """Round a monetary amount to 2 decimals, half up."""
    try:
        return float(Decimal(str(value)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        # non-finite, or more digits than the decimal context holds
        raise InvalidState(f"Invalid monetary amount: {value!r}") from exc


def discounted_line_total(unit_price: float, discount_percent: float, quantity: int) -> float:
    return round_money(float(unit_price) * (1 - float(discount_percent) / 100) * int(quantity))


@dataclass
class CartItem:
    product_id: str
    quantity: int = 1
    discount_percent: float = 0.0
    line_total: float = 0.0
    added_at: Optional[str] = None
    title: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartItem":
        if d is None:
            raise ValueError("Cannot construct CartItem from None")
        return cls(
            product_id=str(_first(d, "productId", "product_id", default="")),
            quantity=int(d.get("quantity") or 1),
            discount_percent=float(_first(d, "discountPercent", "discount_percent", "discount", default=0.0)),
            line_total=float(_first(d, "lineTotal", "line_total", default=0.0)),
            added_at=_first(d, "addedAt", "added_at"),
            title=d.get("title") or None,
            image=d.get("image") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "productId": self.product_id,
            "quantity": int(self.quantity),
            "discountPercent": float(self.discount_percent),
            "lineTotal": float(self.line_total),
            "addedAt": self.added_at,
        }
        # catalog snapshot fields are only stored when present
        if self.title:
            out["title"] = self.title
        if self.image:
            out["image"] = self.image
        return out

    def discount_factor(self) -> float:
        return 1 - float(self.discount_percent or 0) / 100

    def original_unit_price(self) -> float:
        """
        Undiscounted per-unit price, back-computed from the stored line total.
        Always derived from line_total so repeated quantity changes don't
        accumulate rounding from a separately stored unit price.
        """
        factor = self.discount_factor()
        if factor <= 0:
            raise InvalidState(f"Cannot reprice product {self.product_id}: discount is 100%")
        if self.quantity < 1:
            raise InvalidState(f"Cannot reprice product {self.product_id}: quantity is {self.quantity}")
        return float(self.line_total) / factor / int(self.quantity)

    def change_quantity(self, new_quantity: int, at: str) -> None:
        if new_quantity < 1:
            raise InvalidState("Quantity cannot be less than 1")
        unit_price = self.original_unit_price()
        self.quantity = int(new_quantity)
        self.line_total = discounted_line_total(unit_price, self.discount_percent, self.quantity)
        self.added_at = at


@dataclass
class Cart:
    """
    One cart per owner. total_item_count / total_price are derived from items
    and must be recomputed (recompute_totals) after every change to items.
    """
    owner: str
    items: List[CartItem] = field(default_factory=list)
    total_item_count: int = 0
    total_price: float = 0.0
    last_modified_at: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Cart":
        if d is None:
            raise ValueError("Cannot construct Cart from None")
        raw_items = _first(d, "items", "cartItems", default=[])
        items = [it if isinstance(it, CartItem) else CartItem.from_dict(it) for it in raw_items]
        return cls(
            owner=str(_first(d, "owner", "email", default="")),
            items=items,
            total_item_count=int(_first(d, "totalItemCount", "total_item_count", default=0)),
            total_price=float(_first(d, "totalPrice", "total_price", default=0.0)),
            last_modified_at=_first(d, "lastModifiedAt", "last_modified_at"),
            id=d.get("_id"),
        )

    def to_dict(self, include_id: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "owner": self.owner,
            "items": [it.to_dict() for it in self.items],
            "totalItemCount": int(self.total_item_count),
            "totalPrice": float(self.total_price),
            "lastModifiedAt": self.last_modified_at,
        }
        if include_id and self.id:
            out["_id"] = self.id
        return out

    def find_item(self, product_id: str) -> Optional[CartItem]:
        for it in self.items:
            if it.product_id == product_id:
                return it
        return None

    def recompute_totals(self) -> None:
        self.total_item_count = int(sum(int(it.quantity) for it in self.items))
        self.total_price = round_money(sum(float(it.line_total) for it in self.items))
