"""
Review store.

Reviews may only be created for a product that exists at insert time; the
check runs before any row is written.
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Tuple

from sqlalchemy.orm import Session

from catalog.db import models, schemas
from catalog.db.errors import RecordNotFound
from catalog.db.filters import Filters, Metadata
from catalog.db.repositories.base import EntityStore
from catalog.db.repositories.products import product_store

logger = logging.getLogger(__name__)


class ReviewStore(EntityStore):
    def __init__(self, products: EntityStore):
        super().__init__(
            models.Review,
            schemas.Review,
            resource="review",
            sortable=("id", "author", "rating", "helpful_count", "created_at"),
            searchable=("author", "review_text"),
            mutable=("author", "rating", "review_text", "helpful_count"),
        )
        self.products = products

    def _require_product(self, db: Session, product_id: int) -> None:
        if not self.products.exists(db, product_id):
            logger.warning(f"Rejected review for missing product {product_id}")
            raise RecordNotFound(self.products.resource, product_id)

    def insert(self, db: Session, payload: schemas.ReviewCreate) -> schemas.Review:
        self._require_product(db, payload.product_id)
        return super().insert(db, payload)

    def get_all_for_product(
        self,
        db: Session,
        product_id: int,
        search: Mapping[str, str],
        filters: Filters,
    ) -> Tuple[List[schemas.Review], Metadata]:
        self._require_product(db, product_id)
        return self.get_all(db, search, filters, scope={"product_id": product_id})


review_store = ReviewStore(product_store)
