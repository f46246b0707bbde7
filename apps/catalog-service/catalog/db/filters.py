"""
List filters and pagination metadata.

`Filters` turns untrusted page/page_size/sort parameters into a safe query
plan. The sort key is checked against a caller-declared safelist because it
ends up in ORDER BY, where bound parameters cannot be used. Limit and offset
are always passed to the database as bound parameters.
"""
from __future__ import annotations

import math
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from catalog.db.errors import FailedValidation

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


class Metadata(BaseModel):
    """Navigation metadata for one page of a list result."""

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )


class Filters(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Declared before `sort` so the sort validator can see it.
    sort_safelist: Tuple[str, ...] = Field(default=("id",), exclude=True)
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort: str = Field(default="id", validate_default=True)

    @field_validator("sort")
    @classmethod
    def _sort_in_safelist(cls, value: str, info: ValidationInfo) -> str:
        safelist = info.data.get("sort_safelist") or ()
        if value not in safelist:
            raise PydanticCustomError("sort_safelist", "invalid sort value")
        return value

    @classmethod
    def build(cls, sort_safelist, **params: Any) -> "Filters":
        """Validate raw parameters, raising FailedValidation with one message per field."""
        try:
            return cls(sort_safelist=tuple(sort_safelist), **params)
        except ValidationError as exc:
            raise FailedValidation.from_pydantic(exc) from exc

    def sort_column(self) -> str:
        if self.sort not in self.sort_safelist:
            raise FailedValidation({"sort": f"unsafe sort parameter: {self.sort}"})
        return self.sort.removeprefix("-")

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def sort_safelist_for(*columns: str) -> Tuple[str, ...]:
    """Ascending and descending sort keys for the given column keys."""
    return tuple(columns) + tuple(f"-{c}" for c in columns)
