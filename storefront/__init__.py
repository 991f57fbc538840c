"""
Grocery storefront client.

Session-gated mirror of the server-authoritative cart plus thin clients
for the catalog, offers, orders and media uploads.
"""
from storefront.app import StorefrontApp
from storefront.auth import SessionState, SessionStatus
from storefront.cart import Cart, CartItem, CartManager, CartStatus, resolve_unit_price
from storefront.http import ApiClient

__version__ = "1.0.0"

__all__ = [
    "StorefrontApp",
    "ApiClient",
    "SessionState",
    "SessionStatus",
    "Cart",
    "CartItem",
    "CartManager",
    "CartStatus",
    "resolve_unit_price",
]
