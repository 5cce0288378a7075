"""
app/repositories package marker.
"""

from app.repositories.category_repository import CategoryRepository
from app.repositories.product_repository import ProductRepository

__all__ = [
    "CategoryRepository",
    "ProductRepository",
]
