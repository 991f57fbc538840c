"""Category client."""
from typing import List

from storefront.http.client import ApiClient, path_segment
from storefront.models import Category


class CategoryService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_categories(self) -> List[Category]:
        response = await self.client.get("/categories")
        return [Category.model_validate(item) for item in response.get("categories", [])]

    async def get_category_by_slug(self, slug: str) -> Category:
        response = await self.client.get(f"/categories/{path_segment(slug)}")
        return Category.model_validate(response["category"])
