"""Product review client."""
from typing import Any, Dict, List, Optional

from storefront.errors import ERROR_INVALID_RATING, ValidationError
from storefront.http.client import ApiClient, path_segment
from storefront.models import Review, ReviewPage

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating: Any) -> int:
    """Ratings are whole stars from 1 to 5."""
    if not isinstance(rating, int) or isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(ERROR_INVALID_RATING)
    return rating


class ReviewService:
    """Thin client over the ``/reviews`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_product_reviews(
        self,
        product_id: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> ReviewPage:
        params = {"page": page, "limit": limit, "sortBy": sort_by, "sortOrder": sort_order}
        response = await self.client.get(f"/reviews/product/{path_segment(product_id)}", params=params)
        return ReviewPage.model_validate(response)

    async def get_user_reviews(self, page: Optional[int] = None, limit: Optional[int] = None) -> List[Review]:
        response = await self.client.get("/reviews/user", params={"page": page, "limit": limit})
        return [Review.model_validate(item) for item in response.get("reviews", [])]

    async def create_review(
        self,
        product_id: str,
        order_id: str,
        rating: int,
        title: str,
        comment: str,
        images: Optional[List[Dict[str, str]]] = None,
    ) -> Review:
        """Review a product from a delivered order."""
        payload = {
            "productId": product_id,
            "orderId": order_id,
            "rating": validate_rating(rating),
            "title": title,
            "comment": comment,
        }
        if images:
            payload["images"] = images
        response = await self.client.post("/reviews", json=payload)
        return Review.model_validate(response["review"])

    async def update_review(self, review_id: str, **fields: Any) -> Review:
        if "rating" in fields:
            validate_rating(fields["rating"])
        response = await self.client.put(f"/reviews/{path_segment(review_id)}", json=fields)
        return Review.model_validate(response["review"])

    async def delete_review(self, review_id: str) -> None:
        await self.client.delete(f"/reviews/{path_segment(review_id)}")

    async def mark_helpful(self, review_id: str) -> int:
        """Mark a review helpful; returns the new helpful count."""
        response = await self.client.post(f"/reviews/{path_segment(review_id)}/helpful")
        return int(response.get("helpfulCount", 0))
