"""
Generic entity store.

One class serves every entity collection. It is parameterized by the ORM
model, the read schema, and the columns callers may sort on, search on, and
rewrite on update. All SQL for an entity is built here; column names that
reach ORDER BY come only from the declared sortable columns.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, exists, func, null, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from catalog.db import database
from catalog.db.errors import (
    EditConflict,
    FailedValidation,
    RecordNotFound,
    StorageFault,
    StoreError,
    TimeoutFault,
)
from catalog.db.filters import Filters, Metadata, calculate_metadata, sort_safelist_for
from catalog.db.models import MAX_ID, now_utc
from catalog.db.search import optional_text_match

logger = logging.getLogger(__name__)

# SQLSTATE raised by PostgreSQL when statement_timeout cancels a query.
QUERY_CANCELED = "57014"


def is_timeout(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, PoolTimeoutError):
        return True
    if isinstance(exc, OperationalError):
        return getattr(exc.orig, "pgcode", None) == QUERY_CANCELED
    return False


def valid_id(record_id: int) -> bool:
    """Ids outside the identity column's range cannot name a stored row."""
    return 1 <= record_id <= MAX_ID


class EntityStore:
    """CRUD plus filtered listing for one table, with optimistic concurrency."""

    def __init__(
        self,
        model: Type[Any],
        schema: Type[BaseModel],
        *,
        resource: str,
        sortable: Sequence[str],
        searchable: Sequence[str],
        mutable: Sequence[str],
        timeout: Optional[float] = None,
    ):
        self.model = model
        self.schema = schema
        self.resource = resource
        self.sortable = tuple(sortable)
        self.searchable = tuple(searchable)
        self.mutable = tuple(mutable)
        self.timeout = timeout
        self.sort_safelist = sort_safelist_for(*self.sortable)

    @contextmanager
    def _operation(self, db: Session, action: str) -> Iterator[None]:
        try:
            database.apply_statement_timeout(db, self.timeout)
            yield
        except StoreError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            if is_timeout(exc):
                logger.error(f"Timed out during {action} on {self.resource}: {exc}")
                raise TimeoutFault(f"{self.resource} {action} timed out") from exc
            logger.error(f"Storage error during {action} on {self.resource}: {exc}")
            raise StorageFault(f"{self.resource} {action} failed") from exc
        except ValidationError as exc:
            db.rollback()
            logger.error(f"Could not decode {self.resource} row during {action}: {exc}")
            raise StorageFault(f"{self.resource} {action} failed") from exc

    def _exists(self, db: Session, record_id: int) -> bool:
        stmt = select(exists().where(self.model.id == record_id))
        return bool(db.execute(stmt).scalar())

    def exists(self, db: Session, record_id: int) -> bool:
        if not valid_id(record_id):
            return False
        with self._operation(db, "exists"):
            return self._exists(db, record_id)

    def insert(self, db: Session, payload: BaseModel):
        with self._operation(db, "insert"):
            # A plain None is dropped from the INSERT when the column has a
            # default; null() keeps an explicit null.
            values = {
                name: null() if value is None else value
                for name, value in payload.model_dump().items()
            }
            row = self.model(**values)
            db.add(row)
            db.flush()
            db.refresh(row)
            entity = self.schema.model_validate(row)
            db.commit()
        logger.info(f"Created {self.resource} {entity.id}")
        return entity

    def get(self, db: Session, record_id: int):
        if not valid_id(record_id):
            raise RecordNotFound(self.resource, record_id)
        stmt = (
            select(self.model)
            .where(self.model.id == record_id)
            .execution_options(populate_existing=True)
        )
        with self._operation(db, "get"):
            row = db.execute(stmt).scalar_one_or_none()
            if row is None:
                raise RecordNotFound(self.resource, record_id)
            return self.schema.model_validate(row)

    def update(self, db: Session, entity: BaseModel):
        """Write every mutable field of ``entity`` if its version is still current.

        Returns a copy of ``entity`` carrying the new version and update time.
        Raises EditConflict when the row exists with another version, and
        RecordNotFound when it is gone.
        """
        record_id = entity.id
        if not valid_id(record_id):
            raise RecordNotFound(self.resource, record_id)
        values: Dict[str, Any] = {name: getattr(entity, name) for name in self.mutable}
        values["version"] = self.model.version + 1
        values["updated_at"] = now_utc()
        stmt = (
            update(self.model)
            .where(self.model.id == record_id, self.model.version == entity.version)
            .values(**values)
            .returning(self.model.version, self.model.updated_at)
            .execution_options(synchronize_session=False)
        )
        with self._operation(db, "update"):
            row = db.execute(stmt).one_or_none()
            if row is None:
                if self._exists(db, record_id):
                    logger.warning(
                        f"Edit conflict on {self.resource} {record_id}: version {entity.version} is stale"
                    )
                    raise EditConflict(self.resource, record_id)
                logger.warning(f"{self.resource} {record_id} not found for update")
                raise RecordNotFound(self.resource, record_id)
            db.commit()
        return entity.model_copy(update={"version": row.version, "updated_at": row.updated_at})

    def delete(self, db: Session, record_id: int) -> None:
        if not valid_id(record_id):
            raise RecordNotFound(self.resource, record_id)
        stmt = (
            delete(self.model)
            .where(self.model.id == record_id)
            .execution_options(synchronize_session=False)
        )
        with self._operation(db, "delete"):
            result = db.execute(stmt)
            if result.rowcount == 0:
                logger.warning(f"{self.resource} {record_id} not found for delete")
                raise RecordNotFound(self.resource, record_id)
            db.commit()
        logger.info(f"Deleted {self.resource} {record_id}")

    def list_statement(
        self,
        search: Mapping[str, str],
        filters: Filters,
        scope: Optional[Mapping[str, Any]] = None,
    ):
        """Build the page query: search predicates, window count, sort, limit/offset.

        Raises FailedValidation before anything is executed when the sort key or
        a search field is not one this store declares.
        """
        column_key = filters.sort_column()
        if column_key not in self.sortable:
            raise FailedValidation({"sort": "invalid sort value"})
        unknown = sorted(set(search) - set(self.searchable))
        if unknown:
            raise FailedValidation({name: "unknown search field" for name in unknown})

        order_column = getattr(self.model, column_key)
        ordering = order_column.desc() if filters.sort_direction() == "DESC" else order_column.asc()

        stmt = select(func.count().over().label("total_records"), self.model)
        for name in self.searchable:
            stmt = stmt.where(optional_text_match(getattr(self.model, name), search.get(name, "")))
        for name, value in (scope or {}).items():
            stmt = stmt.where(getattr(self.model, name) == value)
        return (
            stmt.order_by(ordering, self.model.id.asc())
            .limit(filters.limit())
            .offset(filters.offset())
            .execution_options(populate_existing=True)
        )

    def get_all(
        self,
        db: Session,
        search: Mapping[str, str],
        filters: Filters,
        scope: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[List[BaseModel], Metadata]:
        stmt = self.list_statement(search, filters, scope)
        total_records = 0
        items: List[BaseModel] = []
        with self._operation(db, "list"):
            for total_records, row in db.execute(stmt).all():
                items.append(self.schema.model_validate(row))
        return items, calculate_metadata(total_records, filters.page, filters.page_size)
