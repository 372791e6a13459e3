"""Query serializer: collection state to list-endpoint query parameters."""

from datetime import date, datetime
from typing import Any, List, Tuple
from urllib.parse import urlencode

from fsp_collection.dates import DATE_VALUE_KEYS, date_params
from fsp_collection.models import FilterSet, SortingOrder

# Keys owned by the list contract; anything else is a caller-declared extra filter.
QUERY_KEYS = frozenset(
    (
        "page",
        "per_page",
        "sort_by",
        "sort_order",
        "search",
        "date_filter_mode",
        "date_field",
        *DATE_VALUE_KEYS,
    )
)


def to_query_value(value: Any) -> str:
    """Convert a scalar filter value to its query-string form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def serialize_params(
    page: int,
    per_page: int,
    sort_by: str,
    sort_order: SortingOrder,
    filters: FilterSet,
    date_field: str = "created_at",
) -> List[Tuple[str, str]]:
    """
    Serialize pagination, sorting and committed filters.

    The order is always: pagination, sort, search, date, extras in
    declaration order. Empty search text, a ``none`` date filter and empty
    extra values produce no keys. Extras named like a contract key are
    dropped so they cannot shadow it.

    Args:
        page: Page number (>= 1)
        per_page: Items per page
        sort_by: Field to sort by
        sort_order: Sorting order
        filters: Committed filter set
        date_field: Server-side field the date filter applies to

    Returns:
        List[Tuple[str, str]]: Ordered key/value pairs

    Raises:
        FilterValidationError: If the date filter is incomplete or malformed
    """
    params = [
        ("page", str(page)),
        ("per_page", str(per_page)),
        ("sort_by", sort_by),
        ("sort_order", str(SortingOrder(sort_order))),
    ]
    if filters.search_text:
        params.append(("search", filters.search_text))
    params.extend(date_params(filters.date_filter, date_field))
    params.extend(
        (key, to_query_value(value))
        for key, value in filters.extra.items()
        if key not in QUERY_KEYS and not _is_empty(value)
    )
    return params


def build_query_string(params: List[Tuple[str, str]]) -> str:
    """URL-encode ordered key/value pairs into a query string."""
    return urlencode(params)
