"""Cart package: models, price policy, and the state manager."""
from .models import CartItem, Cart
from .pricing import resolve_unit_price
from .service import CartManager, CartStatus

__all__ = [
    "CartItem",
    "Cart",
    "CartManager",
    "CartStatus",
    "resolve_unit_price",
]
