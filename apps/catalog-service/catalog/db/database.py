"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with a test
fallback (SQLite in-memory) and exposes the FastAPI session dependency plus
the per-transaction statement timeout used by the stores.
"""
import logging
import os
import sys
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# No storage operation may run longer than this.
QUERY_TIMEOUT_SECONDS = float(os.getenv("DB_QUERY_TIMEOUT_SECONDS", "3"))
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))


# Database connection URL
# Generate dynamically from individual components if DATABASE_URL is not provided
def _get_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")

    missing = [
        name
        for name, value in (
            ("POSTGRES_USER", db_user),
            ("POSTGRES_PASSWORD", db_password),
            ("POSTGRES_HOST", db_host),
            ("POSTGRES_PORT", db_port),
            ("POSTGRES_DB", db_name),
        )
        if not value
    ]
    if missing:
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so also look for the
    pytest package in ``sys.modules``, which is there from collection onwards.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


# Test override strategy:
# 1. CATALOG_TEST_DB wins when set.
# 2. Else TEST_DATABASE_URL (e2e tests against a real Postgres container).
# 3. Else under pytest, an in-memory SQLite database shared through StaticPool.
explicit_test_db = os.getenv("CATALOG_TEST_DB")
explicit_e2e_db = os.getenv("TEST_DATABASE_URL")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
elif explicit_e2e_db:
    DATABASE_URL = explicit_e2e_db
elif _is_pytest_runtime():
    DATABASE_URL = "sqlite+pysqlite:///:memory:"
else:
    DATABASE_URL = _get_database_url()


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_size": POOL_SIZE,
        "pool_timeout": QUERY_TIMEOUT_SECONDS,
        "pool_pre_ping": True,
        "connect_args": {"connect_timeout": max(1, int(QUERY_TIMEOUT_SECONDS))},
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE CASCADE is ignored by SQLite unless enabled per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str):
    eng = create_engine(url, **_engine_kwargs(url))
    if eng.dialect.name == "sqlite":
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine = build_engine(DATABASE_URL)
logger.info("database_engine: dialect=%s timeout=%ss", engine.dialect.name, QUERY_TIMEOUT_SECONDS)

# An in-memory SQLite database has no migrations applied; every connection
# shares it through StaticPool, so create the schema once here.
if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    from catalog.db import models  # local import keeps models free of engine state
    models.Base.metadata.create_all(bind=engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def apply_statement_timeout(db: Session, seconds: Optional[float] = None) -> None:
    """Bound every statement in the current transaction (PostgreSQL only).

    ``SET LOCAL`` lasts until the transaction ends, so stores call this at the
    start of each operation.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    millis = int((seconds if seconds is not None else QUERY_TIMEOUT_SECONDS) * 1000)
    db.execute(text(f"SET LOCAL statement_timeout = {millis}"))


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
