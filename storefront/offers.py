"""
Offers - promo codes and discount math.

Discount rules (match the backend's checkout):
- subtotal below ``minimum_order``: no discount
- percentage: ``subtotal * value / 100``, capped at ``maximum_discount``
- fixed: flat ``value``
- never more than the subtotal itself
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from storefront.errors import ERROR_INVALID_OFFER_CODE, ValidationError
from storefront.http.client import ApiClient, path_segment
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.models import DiscountType, Offer
from storefront.services.money import Number, percent, round_money, to_decimal

logger = get_logger(__name__)


# ============================================
# Discount math
# ============================================

def calculate_discount(offer: Offer, subtotal: Number) -> Decimal:
    """Discount ``offer`` grants on ``subtotal``, rounded to cents."""
    amount = to_decimal(subtotal)
    if amount <= 0 or amount < offer.minimum_order:
        return Decimal("0.00")

    if offer.discount_type == DiscountType.PERCENTAGE:
        discount = percent(amount, offer.value)
        if offer.maximum_discount:
            discount = min(discount, offer.maximum_discount)
    else:
        discount = offer.value

    return round_money(max(Decimal("0"), min(discount, amount)))


def is_offer_valid(offer: Offer, now: Optional[datetime] = None) -> bool:
    """Active, inside its validity window and under its usage limit."""
    now = now or datetime.now(timezone.utc)
    if not offer.is_active:
        return False
    if offer.valid_from and _aware(offer.valid_from) > now:
        return False
    if offer.valid_until and _aware(offer.valid_until) < now:
        return False
    if offer.usage_limit is not None and offer.used_count >= offer.usage_limit:
        return False
    return True


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ============================================
# Service
# ============================================

class OfferService:
    """Client for the public ``/offers`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def list_offers(self) -> List[Offer]:
        """Currently running offers (the backend filters by validity)."""
        response = await self.client.get("/offers")
        return [Offer.model_validate(item) for item in response.get("offers", [])]

    async def get_offer_by_code(self, code: str) -> Offer:
        code = (code or "").strip().upper()
        if not code:
            raise ValidationError(ERROR_INVALID_OFFER_CODE)
        logger.debug(f"Looking up offer {sanitize_string_for_logging(code)}")
        response = await self.client.get(f"/offers/code/{path_segment(code)}")
        return Offer.model_validate(response["offer"])
