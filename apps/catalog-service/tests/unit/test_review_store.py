import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from catalog.db import models, schemas
from catalog.db.errors import EditConflict, RecordNotFound
from catalog.db.filters import Filters
from catalog.db.repositories import product_store, review_store


def _filters(**params):
    return Filters.build(review_store.sort_safelist, **params)


def _review_count(db):
    return db.execute(select(func.count()).select_from(models.Review)).scalar()


def test_review_crud(db, product_factory, review_factory):
    product = product_factory()
    review = review_factory(product.id, author="sam", rating=5)
    assert review.version == 1
    assert review.helpful_count == 0

    fetched = review_store.get(db, review.id)
    assert fetched.product_id == product.id
    assert fetched.author == "sam"
    assert fetched.rating == 5

    updated = review_store.update(db, fetched.model_copy(update={"rating": 3, "helpful_count": 7}))
    assert updated.version == 2
    assert review_store.get(db, review.id).helpful_count == 7

    review_store.delete(db, review.id)
    with pytest.raises(RecordNotFound):
        review_store.get(db, review.id)
    with pytest.raises(RecordNotFound):
        review_store.delete(db, review.id)


def test_review_for_missing_product_is_rejected_before_writing(db):
    payload = schemas.ReviewCreate(product_id=9999, author="sam", rating=4, review_text="Great")
    with pytest.raises(RecordNotFound) as exc_info:
        review_store.insert(db, payload)
    assert exc_info.value.resource == "product"
    assert exc_info.value.record_id == 9999
    assert _review_count(db) == 0


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_rating_outside_range_is_rejected_by_schema(rating):
    with pytest.raises(ValidationError):
        schemas.ReviewCreate(product_id=1, author="sam", rating=rating, review_text="x")


def test_helpful_count_may_be_null(db, product_factory, review_factory):
    product = product_factory()
    review = review_factory(product.id, helpful_count=None)
    assert review_store.get(db, review.id).helpful_count is None
    assert review.helpful_count is None
    stored = db.execute(
        select(models.Review.helpful_count).where(models.Review.id == review.id)
    ).scalar_one()
    assert stored is None


def test_helpful_count_defaults_to_zero_when_omitted(db, product_factory):
    product = product_factory()
    payload = schemas.ReviewCreate(product_id=product.id, author="sam", rating=3, review_text="Fine")
    assert review_store.insert(db, payload).helpful_count == 0


def test_stale_review_version_conflicts(db, product_factory, review_factory):
    product = product_factory()
    review = review_factory(product.id)
    review_store.update(db, review.model_copy(update={"review_text": "Edited once"}))
    with pytest.raises(EditConflict):
        review_store.update(db, review.model_copy(update={"review_text": "Edited from stale copy"}))


def test_deleting_product_cascades_to_reviews(db, product_factory, review_factory):
    product = product_factory()
    other = product_factory(name="Other")
    r1 = review_factory(product.id)
    review_factory(product.id, author="lee")
    kept = review_factory(other.id)

    product_store.delete(db, product.id)

    with pytest.raises(RecordNotFound):
        review_store.get(db, r1.id)
    assert _review_count(db) == 1
    assert review_store.get(db, kept.id).product_id == other.id


def test_get_all_searches_author_and_text(db, product_factory, review_factory):
    product = product_factory()
    review_factory(product.id, author="alex", review_text="Soles wore out fast")
    review_factory(product.id, author="blake", review_text="Great grip on wet rock")
    review_factory(product.id, author="alexis", review_text="Great value")

    items, meta = review_store.get_all(db, {"author": "alex"}, _filters(sort="-author"))
    assert [r.author for r in items] == ["alexis", "alex"]
    assert meta.total_records == 2

    items, _ = review_store.get_all(db, {"review_text": "great", "author": ""}, _filters(sort="author"))
    assert [r.author for r in items] == ["alexis", "blake"]


def test_get_all_for_product_is_scoped(db, product_factory, review_factory):
    first = product_factory()
    second = product_factory(name="Second")
    for rating in (1, 2, 3):
        review_factory(first.id, rating=rating)
    review_factory(second.id, rating=5)

    items, meta = review_store.get_all_for_product(db, first.id, {}, _filters(sort="-rating", page_size=2))
    assert [r.rating for r in items] == [3, 2]
    assert meta.total_records == 3
    assert meta.last_page == 2
    assert all(r.product_id == first.id for r in items)


def test_get_all_for_missing_product_is_not_found(db):
    with pytest.raises(RecordNotFound):
        review_store.get_all_for_product(db, 777, {}, _filters())


def test_product_id_beyond_identity_range_is_rejected(db):
    with pytest.raises(ValidationError):
        schemas.ReviewCreate(product_id=2**63, author="sam", rating=4, review_text="x")
    assert _review_count(db) == 0


def test_out_of_range_product_is_not_found_for_listing(db):
    with pytest.raises(RecordNotFound):
        review_store.get_all_for_product(db, 2**63, {}, _filters())
