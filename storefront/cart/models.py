"""Cart models mirroring the server-authoritative cart."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from storefront.services.money import to_decimal, to_float


@dataclass(frozen=True)
class CartItem:
    """
    Single cart line.

    ``subtotal`` is whatever the server computed; it is never derived from
    ``price * quantity`` on this side.
    """
    product_id: str
    name: str
    price: Decimal
    quantity: int
    unit: str
    subtotal: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """Create from a backend cart line (camelCase keys)."""
        return cls(
            product_id=str(data["productId"]),
            name=data.get("name", ""),
            price=to_decimal(data.get("price")),
            quantity=int(data.get("quantity", 0)),
            unit=data.get("unit", ""),
            subtotal=to_decimal(data.get("subtotal")),
        )

    def to_dict(self) -> dict:
        """Convert back to the backend's wire shape."""
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": to_float(self.price),
            "quantity": self.quantity,
            "unit": self.unit,
            "subtotal": to_float(self.subtotal),
        }


@dataclass(frozen=True)
class Cart:
    """Whole cart as last reported by the server."""
    items: List[CartItem] = field(default_factory=list)
    total: Decimal = Decimal("0")

    @classmethod
    def empty(cls) -> "Cart":
        return cls(items=[], total=Decimal("0"))

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Cart":
        """Create from a backend ``cart`` payload; None means an empty cart."""
        if not data:
            return cls.empty()
        items = [CartItem.from_dict(item) for item in data.get("items", [])]
        return cls(items=items, total=to_decimal(data.get("total")))

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": to_float(self.total),
        }

    @property
    def items_count(self) -> int:
        """Total number of units in the cart (badge value)."""
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_item(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.product_id == product_id), None)
