"""
Product store.

Products are listed with free-text search on name, category and description.
Deleting a product removes its reviews through the foreign key cascade.
"""
from catalog.db import models, schemas
from catalog.db.repositories.base import EntityStore

product_store = EntityStore(
    models.Product,
    schemas.Product,
    resource="product",
    sortable=("id", "name", "category", "average_rating", "created_at"),
    searchable=("name", "category", "description"),
    mutable=("name", "description", "category", "image_url"),
)
