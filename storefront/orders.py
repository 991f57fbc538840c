"""
Orders - checkout, history, cancellation and public tracking.

The backend empties the cart when checkout succeeds, so the local cart
mirror is reset right away instead of being re-fetched.
"""
from typing import Any, Dict, List, Optional, Tuple

from storefront.cart.service import CartManager
from storefront.errors import NOTICE_ORDER_PLACED
from storefront.http.client import ApiClient, path_segment
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Address, DeliverySlot, Order, Pagination, PaymentMethod

logger = get_logger(__name__)


def build_checkout_payload(
    delivery_address: Address,
    payment_method: PaymentMethod,
    delivery_slot: DeliverySlot,
    notes: Optional[str] = None,
    offer_code: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "deliveryAddress": delivery_address.model_dump(by_alias=True, exclude={"id", "is_default", "country"}),
        "paymentMethod": PaymentMethod(payment_method).value,
        "deliverySlot": delivery_slot.model_dump(by_alias=True),
    }
    if notes:
        payload["notes"] = notes
    if offer_code:
        payload["offerCode"] = offer_code.strip().upper()
    return payload


class OrderService:
    """Client for ``/orders``; optionally resets the cart mirror after checkout."""

    def __init__(self, client: ApiClient, cart_manager: Optional[CartManager] = None):
        self.client = client
        self.cart_manager = cart_manager

    async def checkout(
        self,
        delivery_address: Address,
        payment_method: PaymentMethod,
        delivery_slot: DeliverySlot,
        notes: Optional[str] = None,
        offer_code: Optional[str] = None,
    ) -> Order:
        """
        Place an order from the server-side cart.

        Totals (tax, delivery fee, discount) are computed by the backend.

        Raises:
            ApiError: validation failure, empty cart or insufficient stock
        """
        payload = build_checkout_payload(delivery_address, payment_method, delivery_slot, notes, offer_code)
        response = await self.client.post("/orders/checkout", json=payload)
        order = Order.model_validate(response["order"])
        logger.info(f"Order {order.order_number} placed ({sanitize_id_for_logging(order.id)})")

        if self.cart_manager is not None:
            self.cart_manager.discard_local_cart()
        self.client.notifier.success(NOTICE_ORDER_PLACED)
        return order

    async def list_orders(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Order], Pagination]:
        response = await self.client.get("/orders", params={"page": page, "limit": limit, "status": status})
        orders = [Order.model_validate(item) for item in response.get("orders", [])]
        return orders, Pagination.model_validate(response.get("pagination") or {})

    async def get_order(self, order_id: str) -> Order:
        response = await self.client.get(f"/orders/{path_segment(order_id)}")
        return Order.model_validate(response["order"])

    async def cancel_order(self, order_id: str) -> Order:
        response = await self.client.put(f"/orders/{path_segment(order_id)}/cancel")
        return Order.model_validate(response["order"])

    async def track_order(self, order_number: str, email: Optional[str] = None) -> Dict[str, Any]:
        """Public tracking summary (status, timeline, flattened address)."""
        response = await self.client.get("/orders/track", params={"orderNumber": order_number, "email": email})
        return response["order"]
