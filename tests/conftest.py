"""Pytest configuration and fixtures"""
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import pytest_asyncio

# Set test environment variables
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("STOREFRONT_API_URL", "http://testserver/api")

from storefront.auth import SessionState  # noqa: E402
from storefront.cart import CartManager  # noqa: E402
from storefront.http import ApiClient, MemoryTokenStore  # noqa: E402
from storefront.models import Product  # noqa: E402
from storefront.ui import Navigator, Notifier  # noqa: E402

BASE_URL = "http://testserver/api"
VALID_TOKEN = "token-alice-123456"
PASSWORD = "secret"

Override = Union[Tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """
    In-memory storefront backend served through ``httpx.MockTransport``.

    Implements auth and cart routes the way the real backend does (server
    computes subtotals and totals). Any route can be replaced through
    ``overrides[(method, path)]`` with ``(status, body)`` or a handler.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[Tuple[str, str], Override] = {}
        self.valid_token = VALID_TOKEN
        self.password = PASSWORD
        self.user = {
            "_id": "u1",
            "name": "Alice",
            "email": "alice@example.com",
            "phone": "5550100",
            "role": "customer",
        }
        self.cart_items: List[Dict[str, Any]] = []
        self.addresses: List[Dict[str, Any]] = []
        self.reset_tokens = {"reset-abc123"}
        # Added to every reported total, to prove the client never recomputes it
        self.total_adjustment = 0.0

    # ==================== INSPECTION ====================

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or self.path_of(r) == path)
        ]

    def last_json(self, method: str, path: str) -> Any:
        request = self.calls(method, path)[-1]
        return json.loads(request.content)

    @staticmethod
    def path_of(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path

    # ==================== TRANSPORT ====================

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, self.path_of(request)

        override = self.overrides.get((method, path))
        if override is not None:
            if callable(override):
                return override(request)
            status, body = override
            return httpx.Response(status, json=body)

        if path in ("/auth/login", "/auth/admin/login") and method == "POST":
            return self._login(request, admin=path == "/auth/admin/login")
        if path == "/auth/register" and method == "POST":
            body = json.loads(request.content)
            self.user = {**self.user, "name": body["name"], "email": body["email"], "phone": body["phone"]}
            return httpx.Response(201, json={"user": self.user, "token": self.valid_token})

        if path.startswith(("/auth/forgot-password", "/auth/reset-password", "/auth/verify-reset-token/")):
            return self.handle_recovery(request, method, path)

        if not self._authorized(request):
            return httpx.Response(401, json={"message": "Invalid token"})

        if path == "/auth/profile" and method == "GET":
            return httpx.Response(200, json={"user": self.user})
        if path == "/auth/profile" and method == "PUT":
            body = json.loads(request.content)
            self.user = {**self.user, **body}
            return httpx.Response(200, json={"user": self.user})
        if path.startswith("/user/"):
            return self.handle_user(request, method, path)
        if path.startswith("/cart"):
            return self.handle_cart(request, method, path)

        return httpx.Response(404, json={"message": "Not found"})

    # ==================== ROUTES ====================

    def _authorized(self, request: httpx.Request) -> bool:
        return request.headers.get("Authorization") == f"Bearer {self.valid_token}"

    def _login(self, request: httpx.Request, admin: bool) -> httpx.Response:
        body = json.loads(request.content)
        if body.get("password") != self.password:
            message = "Invalid admin credentials" if admin else "Invalid credentials"
            return httpx.Response(401, json={"message": message})
        user = {**self.user, "role": "admin"} if admin else self.user
        return httpx.Response(200, json={"user": user, "token": self.valid_token})

    def handle_recovery(self, request: httpx.Request, method: str, path: str) -> httpx.Response:
        invalid = httpx.Response(400, json={"message": "Invalid or expired reset token"})

        if method == "POST" and path == "/auth/forgot-password":
            if "@" not in json.loads(request.content).get("email", ""):
                return httpx.Response(400, json={"message": "Validation failed"})
            return httpx.Response(200, json={
                "message": "If an account with this email exists, a password reset link has been sent.",
            })

        if method == "GET" and path.startswith("/auth/verify-reset-token/"):
            if path[len("/auth/verify-reset-token/"):] not in self.reset_tokens:
                return invalid
            return httpx.Response(200, json={"message": "Token is valid", "valid": True})

        if method == "POST" and path == "/auth/reset-password":
            body = json.loads(request.content)
            if body.get("token") not in self.reset_tokens:
                return invalid
            self.reset_tokens.discard(body["token"])
            self.password = body["password"]
            return httpx.Response(200, json={"message": "Password reset successfully"})

        return httpx.Response(404, json={"message": "Not found"})

    def handle_user(self, request: httpx.Request, method: str, path: str) -> httpx.Response:
        if path == "/user/address" and method == "GET":
            address = next((a for a in self.addresses if a["isDefault"]), None)
            if address is None and self.addresses:
                address = self.addresses[0]
            return httpx.Response(200, json={"message": "Address retrieved successfully", "data": address})

        if path == "/user/address" and method == "PUT":
            body = json.loads(request.content)
            for address in self.addresses:
                address["isDefault"] = False
            address = {**body, "_id": f"a{len(self.addresses) + 1}", "isDefault": True}
            self.addresses.append(address)
            return httpx.Response(200, json={"message": "Address updated successfully", "data": address})

        if path == "/user/password" and method == "PUT":
            body = json.loads(request.content)
            if body["currentPassword"] != self.password:
                return httpx.Response(400, json={"message": "Current password is incorrect"})
            self.password = body["newPassword"]
            return httpx.Response(200, json={"message": "Password updated successfully"})

        if path == "/user/stats" and method == "GET":
            return httpx.Response(200, json={
                "message": "User statistics retrieved successfully",
                "data": {
                    "totalOrders": 3,
                    "totalSpent": "245.50",
                    "favoriteCategory": "dairy",
                    "memberSince": "Jan 2024",
                },
            })

        return httpx.Response(404, json={"message": "Not found"})

    def handle_cart(self, request: httpx.Request, method: str, path: str) -> httpx.Response:
        if method == "GET" and path == "/cart":
            return self._cart_response("Cart retrieved successfully")

        if method == "POST" and path == "/cart/add":
            body = json.loads(request.content)
            existing = self._find(body["productId"])
            if existing:
                existing["quantity"] += body["quantity"]
            else:
                self.cart_items.append({
                    "productId": body["productId"],
                    "name": body["name"],
                    "price": body["price"],
                    "quantity": body["quantity"],
                    "unit": body["unit"],
                })
            return self._cart_response("Item added to cart successfully")

        if method == "DELETE" and path == "/cart/clear":
            self.cart_items = []
            return httpx.Response(200, json={"message": "Cart cleared successfully", "cart": {"items": [], "total": 0}})

        if path.startswith("/cart/item/"):
            product_id = path[len("/cart/item/"):]
            if method == "PUT":
                quantity = json.loads(request.content)["quantity"]
                item = self._find(product_id)
                if item is None:
                    return httpx.Response(404, json={"message": "Item not found in cart"})
                if quantity == 0:
                    self.cart_items.remove(item)
                else:
                    item["quantity"] = quantity
                return self._cart_response("Cart updated successfully")
            if method == "DELETE":
                self.cart_items = [i for i in self.cart_items if i["productId"] != product_id]
                return self._cart_response("Item removed from cart successfully")

        return httpx.Response(404, json={"message": "Not found"})

    def _find(self, product_id: str) -> Optional[Dict[str, Any]]:
        return next((i for i in self.cart_items if i["productId"] == product_id), None)

    def cart_payload(self) -> Dict[str, Any]:
        items = [{**i, "subtotal": round(i["price"] * i["quantity"], 2)} for i in self.cart_items]
        total = round(sum(i["subtotal"] for i in items) + self.total_adjustment, 2)
        return {"items": items, "total": total}

    def _cart_response(self, message: str) -> httpx.Response:
        return httpx.Response(200, json={"message": message, "cart": self.cart_payload()})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def client(backend, token_store, notifier, navigator) -> ApiClient:
    return ApiClient(
        token_store=token_store,
        notifier=notifier,
        navigator=navigator,
        base_url=BASE_URL,
        transport=httpx.MockTransport(backend.handle),
    )


@pytest.fixture
def session(client) -> SessionState:
    return SessionState(client)


@pytest.fixture
def cart_manager(client, session, notifier) -> CartManager:
    manager = CartManager(client, session, notifier)
    session.subscribe(manager.on_session_change)
    return manager


@pytest_asyncio.fixture
async def signed_in(session, cart_manager, backend, notifier):
    """Authenticated session with a loaded (empty) cart and a clean request log."""
    await session.login("alice@example.com", PASSWORD)
    backend.requests.clear()
    notifier.clear()
    return session


@pytest.fixture
def milk() -> Product:
    return Product.model_validate({"_id": "p1", "name": "Milk", "price": 3.0, "unit": "l", "stock": 10})


@pytest.fixture
def cheese() -> Product:
    return Product.model_validate({
        "_id": "p2",
        "name": "Cheese",
        "price": 10.0,
        "discountedPrice": 8.0,
        "unit": "pack",
        "stock": 5,
    })


@pytest.fixture
def sample_product_payload():
    """Product document as the backend lists it"""
    return {
        "_id": "p3",
        "name": "Basmati Rice",
        "description": "Long grain rice",
        "category": "grains",
        "price": 120,
        "originalPrice": 150,
        "discountedPrice": 100,
        "discountPercentage": 16.67,
        "stock": 40,
        "unit": "kg",
        "images": [{"url": "https://img.example/rice.jpg", "alt": "Rice"}],
        "isActive": True,
        "isFeatured": True,
        "tags": ["staple"],
        "averageRating": 4.5,
        "totalReviews": 12,
    }
