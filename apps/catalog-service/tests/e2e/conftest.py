"""PostgreSQL-backed fixtures.

A throwaway container is started once per session and migrated to head with
Alembic. Tests skip when Docker is not reachable.
"""
import os
import shutil

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy.orm import sessionmaker
from testcontainers.postgres import PostgresContainer

from catalog.db.database import build_engine

SERVICE_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _normalize(url: str) -> str:
    # postgresql+psycopg2://... -> postgresql://...
    if "+" in url.split("://", 1)[0]:
        scheme, rest = url.split("://", 1)
        url = scheme.split("+", 1)[0] + "://" + rest
    return url


@pytest.fixture(scope="session")
def pg_url():
    if os.getenv("SKIP_DOCKER_TESTS") == "1":
        pytest.skip("SKIP_DOCKER_TESTS=1")
    if not shutil.which("docker") and not os.getenv("DOCKER_HOST"):
        pytest.skip("Docker is not available; skipping PostgreSQL tests")

    image = os.getenv("CATALOG_TEST_PG_IMAGE", "postgres:16-alpine")
    try:
        container = PostgresContainer(image)
        container.start()
    except Exception as exc:
        pytest.skip(f"Could not start Postgres test container: {exc}")
    try:
        url = _normalize(container.get_connection_url())
        cfg = Config(os.path.join(SERVICE_ROOT, "alembic.ini"))
        previous = os.environ.get("TEST_DATABASE_URL")
        os.environ["TEST_DATABASE_URL"] = url
        try:
            command.upgrade(cfg, "head")
        finally:
            if previous is None:
                os.environ.pop("TEST_DATABASE_URL", None)
            else:
                os.environ["TEST_DATABASE_URL"] = previous
        yield url
    finally:
        container.stop()


@pytest.fixture(scope="session")
def pg_engine(pg_url):
    eng = build_engine(pg_url)
    yield eng
    eng.dispose()


@pytest.fixture
def pg_session(pg_engine):
    session = sessionmaker(bind=pg_engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with pg_engine.begin() as conn:
            conn.exec_driver_sql("TRUNCATE reviews, products RESTART IDENTITY CASCADE")
