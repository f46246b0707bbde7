"""
API dependency helpers.

Builds validated list filters from query parameters for each store's sort
safelist.
"""
from typing import Callable, Sequence

from fastapi import Query

from catalog.db.filters import DEFAULT_PAGE_SIZE, Filters


def list_filters(sort_safelist: Sequence[str], default_sort: str = "id") -> Callable[..., Filters]:
    """Return a dependency that parses page/page_size/sort for one resource.

    Out-of-range values and sort keys outside ``sort_safelist`` raise
    FailedValidation, which the error handlers turn into a 422.
    """
    safelist = tuple(sort_safelist)

    def _filters(
        page: int = Query(1),
        page_size: int = Query(DEFAULT_PAGE_SIZE),
        sort: str = Query(default_sort),
    ) -> Filters:
        return Filters.build(safelist, page=page, page_size=page_size, sort=sort)

    return _filters
