"""
Reviews API endpoints.

A review can only be created for an existing product; the review store checks
this before writing.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from catalog.api.deps import list_filters
from catalog.db import schemas
from catalog.db.database import get_db
from catalog.db.errors import EditConflict
from catalog.db.filters import Filters
from catalog.db.repositories import review_store

router = APIRouter(prefix="/reviews", tags=["reviews"])

review_filters = list_filters(review_store.sort_safelist)


@router.get("")
def list_reviews_endpoint(
    author: str = "",
    review_text: str = "",
    filters: Filters = Depends(review_filters),
    db: Session = Depends(get_db),
):
    reviews, metadata = review_store.get_all(
        db, {"author": author, "review_text": review_text}, filters
    )
    return {"reviews": reviews, "@metadata": metadata}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review_endpoint(
    review: schemas.ReviewCreate,
    response: Response,
    db: Session = Depends(get_db),
):
    created = review_store.insert(db, review)
    response.headers["Location"] = f"/reviews/{created.id}"
    return {"review": created}


@router.get("/{review_id}")
def get_review_endpoint(review_id: int, db: Session = Depends(get_db)):
    return {"review": review_store.get(db, review_id)}


@router.patch("/{review_id}")
def update_review_endpoint(
    review_id: int,
    patch: schemas.ReviewUpdate,
    db: Session = Depends(get_db),
):
    current = review_store.get(db, review_id)
    if patch.version is not None and patch.version != current.version:
        raise EditConflict(review_store.resource, review_id)
    merged = schemas.apply_patch(current, patch, schemas.ReviewCreate)
    return {"review": review_store.update(db, merged)}


@router.delete("/{review_id}")
def delete_review_endpoint(review_id: int, db: Session = Depends(get_db)):
    review_store.delete(db, review_id)
    return {"message": "review successfully deleted"}
