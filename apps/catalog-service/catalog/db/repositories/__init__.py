"""
Entity stores: the only code that issues SQL against the catalog tables.
"""

from .base import EntityStore
from .products import product_store
from .reviews import ReviewStore, review_store

__all__ = ["EntityStore", "ReviewStore", "product_store", "review_store"]
