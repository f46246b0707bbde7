import pytest
from fastapi.testclient import TestClient

from catalog.db import models, schemas
from catalog.db.database import SessionLocal, engine, get_db
from catalog.db.repositories import product_store, review_store


@pytest.fixture
def db_session():
    """Session on the in-memory SQLite engine; tables are emptied afterwards."""
    models.Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as connection:
            for table in reversed(models.Base.metadata.sorted_tables):
                connection.execute(table.delete())


# Backwards compatibility: some tests read better with a short 'db' name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client(db_session):
    from catalog.api.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def product_factory(db_session):
    def _create(**overrides):
        data = {
            "name": "Trail Shoe",
            "description": "Lightweight running shoe for rough terrain",
            "category": "footwear",
            "image_url": "https://img.example.com/trail-shoe.png",
        }
        data.update(overrides)
        return product_store.insert(db_session, schemas.ProductCreate(**data))
    return _create


@pytest.fixture
def review_factory(db_session):
    def _create(product_id: int, **overrides):
        data = {
            "product_id": product_id,
            "author": "dana",
            "rating": 4,
            "review_text": "Comfortable from the first run",
        }
        data.update(overrides)
        return review_store.insert(db_session, schemas.ReviewCreate(**data))
    return _create
