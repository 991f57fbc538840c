"""Product catalog client (storefront listing plus admin product management)."""
from typing import Any, Dict, List, Optional

from storefront.errors import ERROR_INVALID_QUANTITY, ValidationError
from storefront.http.client import ApiClient, path_segment
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.models import Product, ProductPage

logger = get_logger(__name__)

FEATURED_LIMIT = 8
DEFAULT_LIMIT = 20


class ProductService:
    """Thin client over the ``/products`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        featured: Optional[bool] = None,
    ) -> ProductPage:
        """List active products with optional filtering and pagination."""
        params = {
            "category": category,
            "search": search,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "page": page,
            "limit": limit,
            "minPrice": min_price,
            "maxPrice": max_price,
            "featured": "true" if featured else None,
        }
        logger.debug(f"Fetching products with params: {sanitize_string_for_logging(str(params), 200)}")
        response = await self.client.get("/products", params=params)
        return ProductPage.model_validate(response)

    async def get_product(self, product_id: str) -> Product:
        response = await self.client.get(f"/products/{path_segment(product_id)}")
        return Product.model_validate(response["product"])

    async def get_featured_products(self) -> List[Product]:
        page = await self.get_products(featured=True, limit=FEATURED_LIMIT)
        return page.products

    async def search_products(self, query: str, limit: int = DEFAULT_LIMIT) -> List[Product]:
        response = await self.client.get("/products/search/query", params={"q": query, "limit": limit})
        return _parse_products(response)

    async def get_products_by_category(self, category: str, limit: int = DEFAULT_LIMIT) -> List[Product]:
        page = await self.get_products(category=category, limit=limit)
        return page.products

    async def get_categories(self) -> List[str]:
        """Distinct category keys used by products."""
        response = await self.client.get("/products/meta/categories")
        return list(response.get("categories", []))

    async def get_promotional_products(self) -> List[Product]:
        response = await self.client.get("/products/promotional/list")
        return _parse_products(response)

    # ==================== ADMIN ====================

    async def create_product(self, product_data: Dict[str, Any]) -> Product:
        response = await self.client.post("/products", json=product_data)
        return Product.model_validate(response["product"])

    async def update_product(self, product_id: str, update_data: Dict[str, Any]) -> Product:
        response = await self.client.put(f"/products/{path_segment(product_id)}", json=update_data)
        return Product.model_validate(response["product"])

    async def delete_product(self, product_id: str) -> None:
        await self.client.delete(f"/products/{path_segment(product_id)}")

    async def update_stock(self, product_id: str, stock: int) -> Product:
        if not isinstance(stock, int) or isinstance(stock, bool) or stock < 0:
            raise ValidationError(ERROR_INVALID_QUANTITY)
        response = await self.client.patch(f"/products/{path_segment(product_id)}/stock", json={"stock": stock})
        return Product.model_validate(response["product"])

    async def toggle_featured(self, product_id: str) -> Product:
        response = await self.client.patch(f"/products/{path_segment(product_id)}/featured")
        return Product.model_validate(response["product"])

    async def toggle_active(self, product_id: str) -> Product:
        response = await self.client.patch(f"/products/{path_segment(product_id)}/active")
        return Product.model_validate(response["product"])


def _parse_products(response: Any) -> List[Product]:
    if not isinstance(response, dict):
        return []
    return [Product.model_validate(item) for item in response.get("products", [])]
