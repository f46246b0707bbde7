"""
Pydantic schemas for request validation and API responses.

Re-exports every schema so callers can use `from catalog.db import schemas`.
"""

from catalog.db.filters import Metadata
from .common import apply_patch
from .products import ProductBase, ProductCreate, ProductUpdate, Product
from .reviews import ReviewBase, ReviewCreate, ReviewUpdate, Review

__all__ = [
    "Metadata",
    "apply_patch",
    # Products
    "ProductBase",
    "ProductCreate",
    "ProductUpdate",
    "Product",
    # Reviews
    "ReviewBase",
    "ReviewCreate",
    "ReviewUpdate",
    "Review",
]
