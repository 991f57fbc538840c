"""Catalog package: products, categories, reviews."""
from .products import ProductService
from .categories import CategoryService
from .reviews import ReviewService

__all__ = [
    "ProductService",
    "CategoryService",
    "ReviewService",
]
