"""
ORM models for the catalog.

Exposes `Base`, `now_utc` and the mapped classes so callers can use
`from catalog.db import models` and `models.Product`.
"""

from .base import MAX_ID, Base, IdentityType, now_utc  # re-export

from .products import Product
from .reviews import Review

__all__ = [
    "Base",
    "IdentityType",
    "MAX_ID",
    "now_utc",
    "Product",
    "Review",
]
