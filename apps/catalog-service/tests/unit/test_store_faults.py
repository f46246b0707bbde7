from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from catalog.db import database, schemas
from catalog.db.errors import StorageFault, TimeoutFault
from catalog.db.filters import Filters
from catalog.db.repositories import product_store
from catalog.db.repositories.base import is_timeout


class _QueryCanceled(Exception):
    pgcode = "57014"


class _ConnectionRefused(Exception):
    pgcode = "08006"


def _failing_session(exc):
    db = MagicMock()
    db.execute.side_effect = exc
    db.flush.side_effect = exc
    return db


def test_statement_timeout_maps_to_timeout_fault():
    db = _failing_session(OperationalError("SELECT ...", {}, _QueryCanceled("canceling statement")))
    with pytest.raises(TimeoutFault):
        product_store.get(db, 1)
    db.rollback.assert_called_once()


def test_pool_checkout_timeout_maps_to_timeout_fault():
    db = _failing_session(PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached"))
    filters = Filters.build(product_store.sort_safelist)
    with pytest.raises(TimeoutFault):
        product_store.get_all(db, {}, filters)


def test_other_operational_errors_are_storage_faults():
    db = _failing_session(OperationalError("SELECT ...", {}, _ConnectionRefused("server closed")))
    with pytest.raises(StorageFault) as exc_info:
        product_store.exists(db, 3)
    assert not isinstance(exc_info.value, TimeoutFault)
    db.rollback.assert_called_once()


def test_constraint_violation_on_insert_is_a_storage_fault():
    db = _failing_session(IntegrityError("INSERT ...", {}, Exception("violates not-null")))
    payload = schemas.ProductCreate(name="n", description="d", category="c", image_url="u")
    with pytest.raises(StorageFault) as exc_info:
        product_store.insert(db, payload)
    # Internal error text stays on the chained cause
    assert "violates" not in str(exc_info.value)
    assert "violates" in str(exc_info.value.__cause__)
    db.rollback.assert_called_once()


def test_is_timeout_ignores_plain_errors():
    assert is_timeout(OperationalError("x", {}, Exception("no pgcode"))) is False
    assert is_timeout(PoolTimeoutError("pool")) is True


def test_statement_timeout_is_set_per_transaction_on_postgres():
    db = MagicMock()
    db.get_bind.return_value.dialect.name = "postgresql"
    database.apply_statement_timeout(db, 3)
    (clause,), _ = db.execute.call_args
    assert str(clause) == "SET LOCAL statement_timeout = 3000"


def test_statement_timeout_skipped_on_other_dialects():
    db = MagicMock()
    db.get_bind.return_value.dialect.name = "sqlite"
    database.apply_statement_timeout(db)
    db.execute.assert_not_called()


def test_default_timeout_is_three_seconds(monkeypatch):
    db = MagicMock()
    db.get_bind.return_value.dialect.name = "postgresql"
    monkeypatch.setattr(database, "QUERY_TIMEOUT_SECONDS", 3.0)
    database.apply_statement_timeout(db)
    (clause,), _ = db.execute.call_args
    assert str(clause).endswith("= 3000")
