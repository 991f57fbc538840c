"""Price resolution applied when an item is added to the cart."""
from decimal import Decimal

from storefront.models import Product
from storefront.services.money import compare, to_decimal


def resolve_unit_price(product: Product) -> Decimal:
    """
    Effective unit price for a new cart line.

    The discounted price wins only when it is present, non-zero and strictly
    lower than the list price; otherwise the list price is used. The result
    is sent to the backend as-is.
    """
    price = to_decimal(product.price)
    discounted = product.discounted_price
    if discounted is not None and discounted > 0 and compare(discounted, price) < 0:
        return to_decimal(discounted)
    return price
