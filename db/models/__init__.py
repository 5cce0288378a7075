"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.category import Category
from db.models.product import Product

__all__ = [
    "Category",
    "Product",
]
