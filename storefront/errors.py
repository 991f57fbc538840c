"""
Common error messages and exception types.

Message constants are shared between the HTTP facade, the session and the
cart so user-facing wording lives in one place.
"""
from typing import Any, Optional

# Generic errors
ERROR_GENERIC = "An error occurred"
ERROR_NETWORK = "Network error. Please check your connection."
ERROR_UNAUTHORIZED = "Unauthorized"

# Session errors
ERROR_LOGIN_REQUIRED = "Please login to add items to cart"
ERROR_LOGIN_REQUIRED_CART = "Please login to manage your cart"

# Account errors
ERROR_PASSWORD_TOO_SHORT = "Password must be at least 6 characters"
ERROR_PASSWORD_MISMATCH = "Passwords do not match"
ERROR_CURRENT_PASSWORD_REQUIRED = "Current password is required"
ERROR_INVALID_EMAIL = "Please provide a valid email"
ERROR_ADDRESS_INCOMPLETE = "Street, city, state, ZIP code and country are required"
ERROR_INVALID_ADDRESS_TYPE = "Address type must be home, work, or other"

# Cart errors
ERROR_INVALID_QUANTITY = "Quantity must be a non-negative integer"
ERROR_INVALID_ADD_QUANTITY = "Quantity must be at least 1"
ERROR_INVALID_PRODUCT = "Valid product ID is required"

# Review errors
ERROR_INVALID_RATING = "Rating must be between 1 and 5"

# Offer errors
ERROR_INVALID_OFFER_CODE = "Offer code is required"

# Success notices
NOTICE_ITEM_ADDED = "{name} added to cart"
NOTICE_ITEM_REMOVED = "Item removed from cart"
NOTICE_CART_CLEARED = "Cart cleared"
NOTICE_ORDER_PLACED = "Order placed successfully"
NOTICE_RESET_LINK_SENT = "Password reset link sent to your email"
NOTICE_PASSWORD_RESET = "Password reset successfully"
NOTICE_PASSWORD_UPDATED = "Password updated successfully"
NOTICE_ADDRESS_UPDATED = "Address updated successfully"


class StorefrontError(Exception):
    """Base class for every error raised by the storefront client."""

    def __init__(self, message: str = ERROR_GENERIC):
        super().__init__(message)
        self.message = message


class ApiError(StorefrontError):
    """Backend answered with an error status."""

    def __init__(
        self,
        message: str = ERROR_GENERIC,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code!r}, message={self.message!r})"


class AuthenticationError(ApiError):
    """Backend rejected the bearer token (HTTP 401)."""

    def __init__(self, message: str = ERROR_UNAUTHORIZED, payload: Any = None):
        super().__init__(message, status_code=401, payload=payload)


class NetworkError(StorefrontError):
    """Request never produced an HTTP response (DNS, connect, timeout)."""


class ValidationError(StorefrontError):
    """Input rejected locally before any request was made."""


__all__ = [
    "StorefrontError",
    "ApiError",
    "AuthenticationError",
    "NetworkError",
    "ValidationError",
]
