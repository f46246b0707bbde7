"""
Products API endpoints.

List, create, show, partially update and delete products, and list the
reviews of one product.
"""
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from catalog.api.deps import list_filters
from catalog.db import schemas
from catalog.db.database import get_db
from catalog.db.errors import EditConflict
from catalog.db.filters import Filters
from catalog.db.repositories import product_store, review_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

product_filters = list_filters(product_store.sort_safelist)
product_review_filters = list_filters(review_store.sort_safelist)


@router.get("")
def list_products_endpoint(
    name: str = "",
    category: str = "",
    description: str = "",
    filters: Filters = Depends(product_filters),
    db: Session = Depends(get_db),
):
    products, metadata = product_store.get_all(
        db,
        {"name": name, "category": category, "description": description},
        filters,
    )
    return {"products": products, "@metadata": metadata}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product_endpoint(
    product: schemas.ProductCreate,
    response: Response,
    db: Session = Depends(get_db),
):
    created = product_store.insert(db, product)
    response.headers["Location"] = f"/products/{created.id}"
    return {"product": created}


@router.get("/{product_id}")
def get_product_endpoint(product_id: int, db: Session = Depends(get_db)):
    return {"product": product_store.get(db, product_id)}


@router.patch("/{product_id}")
def update_product_endpoint(
    product_id: int,
    patch: schemas.ProductUpdate,
    db: Session = Depends(get_db),
):
    current = product_store.get(db, product_id)
    if patch.version is not None and patch.version != current.version:
        raise EditConflict(product_store.resource, product_id)
    merged = schemas.apply_patch(current, patch, schemas.ProductCreate)
    return {"product": product_store.update(db, merged)}


@router.delete("/{product_id}")
def delete_product_endpoint(product_id: int, db: Session = Depends(get_db)):
    product_store.delete(db, product_id)
    return {"message": "product successfully deleted"}


@router.get("/{product_id}/reviews")
def list_product_reviews_endpoint(
    product_id: int,
    author: str = "",
    review_text: str = "",
    filters: Filters = Depends(product_review_filters),
    db: Session = Depends(get_db),
):
    reviews, metadata = review_store.get_all_for_product(
        db,
        product_id,
        {"author": author, "review_text": review_text},
        filters,
    )
    return {"reviews": reviews, "@metadata": metadata}
