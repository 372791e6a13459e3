"""Server side of the list query contract for FastAPI + SQLModel."""

from datetime import date, datetime, tzinfo
from datetime import timezone as dt_timezone
from math import ceil
from typing import Any, Dict, Iterable, Optional, Tuple

from dateutil.parser import parse
from fastapi import HTTPException, Query, Request, status
from pydantic import BaseModel, Field
from sqlalchemy import ColumnCollection, ColumnElement, Select, String, cast, func, or_
from sqlmodel import Session, select

from fsp_collection.dates import resolve_date_range, validate_date_filter
from fsp_collection.errors import FilterValidationError
from fsp_collection.models import DateFilter, DateFilterMode, PageResult, SortingOrder
from fsp_collection.query import QUERY_KEYS


def _coerce_value(column: ColumnElement[Any], raw: str) -> Any:
    """
    Coerce raw string value to column's Python type.

    Args:
        column: SQLAlchemy column element
        raw: Raw string value

    Returns:
        Any: Coerced value, or the raw string if it cannot be coerced
    """
    try:
        pytype = getattr(column.type, "python_type", None)
    except NotImplementedError:
        pytype = None
    if pytype is None or isinstance(raw, pytype):
        return raw
    if pytype is bool:
        val = raw.strip().lower()
        if val in {"true", "1", "t", "yes", "y"}:
            return True
        if val in {"false", "0", "f", "no", "n"}:
            return False
        return raw
    if pytype is datetime:
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            try:
                return parse(raw)
            except ValueError:
                return raw
    if pytype is date:
        try:
            return date.fromisoformat(raw)
        except ValueError:
            return raw
    try:
        return pytype(raw)
    except (TypeError, ValueError):
        return raw


def _is_string_column(column: ColumnElement[Any]) -> bool:
    try:
        return getattr(column.type, "python_type", None) is str
    except NotImplementedError:
        return False


def _is_timezone_aware(column: ColumnElement[Any]) -> bool:
    return bool(getattr(column.type, "timezone", False))


class ListQuery(BaseModel):
    """Parsed list query: pagination, sort, search, date filter and extras."""

    page: int = Field(1, ge=1)
    per_page: int = Field(15, ge=1, le=100)
    search: Optional[str] = None
    sort_by: str = "created_at"
    sort_order: SortingOrder = SortingOrder.DESC
    date_field: str = "created_at"
    date_filter: DateFilter = Field(default_factory=DateFilter)
    extra: Dict[str, str] = Field(default_factory=dict)


def parse_list_query(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(15, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, max_length=255),
    sort_by: str = Query("created_at"),
    sort_order: SortingOrder = Query(SortingOrder.DESC),
    date_filter_mode: DateFilterMode = Query(DateFilterMode.NONE),
    date_field: str = Query("created_at"),
    exact_date: Optional[date] = Query(None),
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    year: Optional[str] = Query(None, pattern=r"^\d{4}$"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
) -> ListQuery:
    """
    Parse list query parameters.

    Every parameter outside the list contract is collected as an extra
    equality filter, e.g. ``?status=active``.

    Returns:
        ListQuery: Parsed list query
    """
    date_filter = DateFilter(
        mode=date_filter_mode,
        exact_date=exact_date,
        month=month,
        year=year,
        start_date=start_date,
        end_date=end_date,
    )
    extra = {
        key: value
        for key, value in request.query_params.items()
        if key not in QUERY_KEYS and value != ""
    }
    return ListQuery(
        page=page,
        per_page=per_page,
        search=search or None,
        sort_by=sort_by,
        sort_order=sort_order,
        date_field=date_field or "created_at",
        date_filter=date_filter,
        extra=extra,
    )


class ListQueryEngine:
    """
    Applies a ListQuery to a SQLModel select and builds the list page.

    - search: case-insensitive CONTAINS on any of ``search_fields``
    - date filter: inclusive range on ``date_field``
    - extras: equality on each field, value coerced to the column type
    - sort and pagination

    Unknown fields are skipped, or rejected with HTTP 400 in strict mode.
    """

    def __init__(
        self,
        list_query: ListQuery,
        search_fields: Iterable[str] = (),
        extra_fields: Optional[Iterable[str]] = None,
        strict_mode: bool = False,
        timezone: tzinfo = dt_timezone.utc,
    ):
        """
        Initialize ListQueryEngine.

        Args:
            list_query: Parsed list query
            search_fields: Fields matched against the search text
            extra_fields: Fields accepted as extra filters, None for any column
            strict_mode: If True, raise errors for unknown fields
            timezone: Time zone of the date filter bounds on timezone-aware columns
                (default: UTC)
        """
        self.list_query = list_query
        self.search_fields = list(search_fields)
        self.extra_fields = set(extra_fields) if extra_fields is not None else None
        self.strict_mode = strict_mode
        self.timezone = timezone

    def _resolve_column(
        self,
        query: Select,
        columns_map: ColumnCollection[str, ColumnElement[Any]],
        field: str,
    ) -> Optional[ColumnElement[Any]]:
        column = columns_map.get(field)
        if column is None:
            entity = query.column_descriptions[0].get("entity") if query.column_descriptions else None
            attr = getattr(entity, field, None) if entity is not None else None
            if hasattr(attr, "__clause_element__"):
                column = attr.__clause_element__()
        if column is None and self.strict_mode:
            available = ", ".join(sorted(columns_map.keys()))
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown field '{field}'. Available fields: {available}",
            )
        return column

    def apply_search(self, query: Select, columns_map: ColumnCollection) -> Select:
        term = self.list_query.search
        if not term or not self.search_fields:
            return query

        pattern = f"%{term}%"
        conditions = []
        for field in self.search_fields:
            column = self._resolve_column(query, columns_map, field)
            if column is None:
                continue
            if not _is_string_column(column):
                column = cast(column, String)
            conditions.append(column.ilike(pattern))

        if conditions:
            query = query.where(or_(*conditions))
        return query

    def apply_date_filter(self, query: Select, columns_map: ColumnCollection) -> Select:
        date_filter = self.list_query.date_filter
        if not date_filter.is_active:
            return query

        try:
            validate_date_filter(date_filter)
        except FilterValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

        column = self._resolve_column(query, columns_map, self.list_query.date_field)
        if column is None:
            return query
        # Timezone-aware columns only accept aware bounds.
        tz = self.timezone if _is_timezone_aware(column) else None
        start, end = resolve_date_range(date_filter, tz)
        return query.where(column.between(start, end))

    def apply_extra(self, query: Select, columns_map: ColumnCollection) -> Select:
        conditions = []
        for field, raw in self.list_query.extra.items():
            if self.extra_fields is not None and field not in self.extra_fields:
                if self.strict_mode:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Unknown filter '{field}'",
                    )
                continue
            column = self._resolve_column(query, columns_map, field)
            if column is not None:
                conditions.append(column == _coerce_value(column, raw))

        if conditions:
            query = query.where(*conditions)
        return query

    def apply_sort(self, query: Select, columns_map: ColumnCollection) -> Select:
        column = self._resolve_column(query, columns_map, self.list_query.sort_by)
        if column is None:
            return query
        if self.list_query.sort_order == SortingOrder.DESC:
            return query.order_by(column.desc())
        return query.order_by(column.asc())

    def apply(self, query: Select) -> Select:
        """
        Apply search, date filter, extras and sort to a query.

        Args:
            query: Base SQLAlchemy Select query

        Returns:
            Select: Filtered and sorted query

        Raises:
            HTTPException: On a malformed date filter, or an unknown field in strict mode
        """
        columns_map = query.selected_columns
        query = self.apply_search(query, columns_map)
        query = self.apply_date_filter(query, columns_map)
        query = self.apply_extra(query, columns_map)
        return self.apply_sort(query, columns_map)

    def paginate_with_count(self, query: Select, session: Session) -> Tuple[Any, int]:
        """
        Count matching rows and fetch the requested page.

        Args:
            query: Filtered and sorted query
            session: Database session

        Returns:
            Tuple[Any, int]: (page_data, total_count)
        """
        total = session.exec(select(func.count()).select_from(query.subquery())).one()
        per_page = self.list_query.per_page
        data = session.exec(
            query.offset((self.list_query.page - 1) * per_page).limit(per_page)
        ).all()
        return data, total

    def build_response(self, total: int, data_page: Any) -> PageResult[Any]:
        total_pages = max(1, ceil(total / self.list_query.per_page))
        return PageResult(data=list(data_page), total=total, total_pages=total_pages)

    def generate_response(self, query: Select, session: Session) -> PageResult[Any]:
        """
        Generate a complete list page.

        Args:
            query: Base SQLAlchemy Select query
            session: Database session

        Returns:
            PageResult: ``{data, total, total_pages}`` payload
        """
        query = self.apply(query)
        data_page, total = self.paginate_with_count(query, session)
        return self.build_response(total, data_page)
