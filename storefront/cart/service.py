"""
Cart State Manager

Keeps the single local mirror of the signed-in user's server cart.

Rules:
- Every successful response replaces the local cart wholesale; totals and
  subtotals are taken verbatim from the server.
- Mutations are rejected locally (no request) while the session is anonymous.
- Mutations run one at a time per manager; a second call waits for the
  first to settle instead of racing it.
- A response is applied only if the session epoch it started under is
  still current, so replies landing after logout are dropped.
"""
import asyncio
from enum import Enum
from typing import Any, Callable, List, Optional

from storefront.auth.session import SessionState, SessionStatus
from storefront.cart.models import Cart
from storefront.cart.pricing import resolve_unit_price
from storefront.errors import (
    ERROR_INVALID_ADD_QUANTITY,
    ERROR_INVALID_PRODUCT,
    ERROR_INVALID_QUANTITY,
    ERROR_LOGIN_REQUIRED,
    ERROR_LOGIN_REQUIRED_CART,
    NOTICE_CART_CLEARED,
    NOTICE_ITEM_ADDED,
    NOTICE_ITEM_REMOVED,
    StorefrontError,
)
from storefront.http.client import ApiClient, path_segment
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Product
from storefront.services.money import to_float
from storefront.ui import Notifier

logger = get_logger(__name__)

CartListener = Callable[[Cart], None]


class CartStatus(str, Enum):
    EMPTY = "empty"  # no session
    SYNCING = "syncing"  # request in flight
    READY = "ready"  # mirrors the server (items may be empty)


class CartManager:
    """
    Manages the local mirror of the server cart.

    Collaborators are passed in explicitly: the HTTP client, the session
    whose identity gates every mutation, and the notifier for toasts.
    """

    def __init__(self, client: ApiClient, session: SessionState, notifier: Optional[Notifier] = None):
        self.client = client
        self.session = session
        self.notifier = notifier or client.notifier
        self._cart = Cart.empty()
        self.status = CartStatus.EMPTY
        self._lock = asyncio.Lock()
        self._in_flight = 0
        self._listeners: List[CartListener] = []

    # ==================== READ SIDE ====================

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def is_busy(self) -> bool:
        """True while a cart request is in flight or queued."""
        return self._in_flight > 0 or self._lock.locked()

    @property
    def cart_items_count(self) -> int:
        return self._cart.items_count

    def get_item_quantity(self, product_id: str) -> int:
        """Quantity of ``product_id`` in the local cart, 0 if absent. No I/O."""
        item = self._cart.get_item(product_id)
        return item.quantity if item else 0

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a listener receiving the new cart after every replacement."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== SESSION GATING ====================

    async def on_session_change(self, status: SessionStatus) -> None:
        """Reload on sign-in, reset on sign-out; never merge."""
        if status == SessionStatus.AUTHENTICATED:
            await self.refresh()
        elif status == SessionStatus.ANONYMOUS:
            self._reset(CartStatus.EMPTY)

    def _require_session(self, message: str) -> bool:
        if self.session.is_authenticated:
            return True
        self.notifier.error(message)
        return False

    # ==================== OPERATIONS ====================

    async def refresh(self) -> bool:
        """
        Fetch the cart from the backend and replace local state.

        Silent on failure: background refreshes only log.
        """
        if not self.session.is_authenticated:
            return False
        return await self._send("GET", "/cart", action="refresh cart", quiet=True)

    async def add_to_cart(self, product: Product, quantity: int = 1) -> bool:
        """
        Add ``quantity`` units of ``product``.

        The unit price is resolved once here (discounted price when lower)
        and sent with the request; name and unit are captured at add time.
        """
        if not self._require_session(ERROR_LOGIN_REQUIRED):
            return False
        if not _is_int(quantity) or quantity < 1:
            self.notifier.error(ERROR_INVALID_ADD_QUANTITY)
            return False

        price = resolve_unit_price(product)
        payload = {
            "productId": product.id,
            "quantity": quantity,
            "name": product.name,
            "price": to_float(price),
            "unit": product.unit,
        }
        ok = await self._send("POST", "/cart/add", json=payload, action="add to cart")
        if ok:
            self.notifier.success(NOTICE_ITEM_ADDED.format(name=product.name))
        return ok

    async def update_quantity(self, product_id: str, quantity: int) -> bool:
        """Set the absolute quantity of a line; 0 removes it server-side."""
        if not self._require_session(ERROR_LOGIN_REQUIRED_CART):
            return False
        if not product_id:
            self.notifier.error(ERROR_INVALID_PRODUCT)
            return False
        if not _is_int(quantity) or quantity < 0:
            self.notifier.error(ERROR_INVALID_QUANTITY)
            return False

        return await self._send(
            "PUT",
            f"/cart/item/{path_segment(product_id)}",
            json={"quantity": quantity},
            action="update cart",
        )

    async def remove_from_cart(self, product_id: str) -> bool:
        if not self._require_session(ERROR_LOGIN_REQUIRED_CART):
            return False
        if not product_id:
            self.notifier.error(ERROR_INVALID_PRODUCT)
            return False

        ok = await self._send("DELETE", f"/cart/item/{path_segment(product_id)}", action="remove from cart")
        if ok:
            self.notifier.success(NOTICE_ITEM_REMOVED)
        return ok

    async def clear_cart(self) -> bool:
        """Empty the cart; local state is reset without a re-fetch."""
        if not self._require_session(ERROR_LOGIN_REQUIRED_CART):
            return False

        ok = await self._send("DELETE", "/cart/clear", action="clear cart", replace_with_empty=True)
        if ok:
            self.notifier.success(NOTICE_CART_CLEARED)
        return ok

    def discard_local_cart(self) -> None:
        """Reset to an empty, in-sync cart after the server emptied it (checkout)."""
        if self.session.is_authenticated:
            self._reset(CartStatus.READY)

    # ==================== INTERNAL HELPERS ====================

    async def _send(
        self,
        method: str,
        path: str,
        *,
        action: str,
        json: Any = None,
        replace_with_empty: bool = False,
        quiet: bool = False,
    ) -> bool:
        """Run one cart request under the lock and apply its result."""
        epoch = self.session.epoch
        async with self._lock:
            if epoch != self.session.epoch or not self.session.is_authenticated:
                logger.info(f"Skipping queued '{action}': session changed while waiting")
                return False

            previous_status = self.status
            self._in_flight += 1
            self.status = CartStatus.SYNCING
            try:
                response = await self.client.request(method, path, json=json, quiet=quiet)
            except StorefrontError as e:
                logger.error(f"Failed to {action}: {e.message}")
                return False
            finally:
                self._in_flight -= 1
                self.status = previous_status if self.session.is_authenticated else CartStatus.EMPTY

            if epoch != self.session.epoch or not self.session.is_authenticated:
                logger.info(f"Discarding stale '{action}' response")
                return False

            if replace_with_empty:
                self._replace(Cart.empty())
                return True

            try:
                cart = Cart.from_dict((response or {})["cart"])
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Malformed cart payload on '{action}': {type(e).__name__}: {e}")
                return False

            self._replace(cart)
            logger.debug(
                f"Cart synced after '{action}': {len(cart.items)} lines, total={cart.total}, "
                f"user={sanitize_id_for_logging(self.session.user.id if self.session.user else None)}"
            )
            return True

    def _replace(self, cart: Cart) -> None:
        self._cart = cart
        self.status = CartStatus.READY
        self._notify()

    def _reset(self, status: CartStatus) -> None:
        self._cart = Cart.empty()
        self.status = status
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._cart)
            except Exception:
                logger.exception("Cart listener failed")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
