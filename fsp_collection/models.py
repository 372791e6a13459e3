"""Collection controller models"""

from datetime import date, datetime
from enum import StrEnum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

DateLike = Union[date, str]


class SortingOrder(StrEnum):
    """Sorting orders"""

    ASC = "asc"  # ascending order
    DESC = "desc"  # descending order

    def toggled(self) -> "SortingOrder":
        """Return the opposite order."""
        return SortingOrder.DESC if self is SortingOrder.ASC else SortingOrder.ASC


class DateFilterMode(StrEnum):
    """Date filter modes"""

    NONE = "none"  # no date restriction
    EXACT = "exact"  # a single day
    MONTH = "month"  # a calendar month (YYYY-MM)
    YEAR = "year"  # a calendar year (YYYY)
    RANGE = "range"  # inclusive start/end days


class DateFilter(BaseModel):
    """Tagged date filter value.

    Exactly one mode is active; fields that do not belong to the active mode
    are ignored. Values may be incomplete while the filter is being edited,
    they are only checked when the filter is committed.

    Example:
        DateFilter.between("2024-01-01", "2024-01-31")
        DateFilter.for_month("2024-03")
    """

    model_config = ConfigDict(frozen=True)

    mode: DateFilterMode = DateFilterMode.NONE
    exact_date: Optional[DateLike] = None
    month: Optional[DateLike] = None
    year: Optional[Union[int, str]] = None
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None

    @field_validator("exact_date", "month", "start_date", "end_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value

    @classmethod
    def none(cls) -> "DateFilter":
        return cls()

    @classmethod
    def exact(cls, exact_date: DateLike) -> "DateFilter":
        return cls(mode=DateFilterMode.EXACT, exact_date=exact_date)

    @classmethod
    def for_month(cls, month: DateLike) -> "DateFilter":
        return cls(mode=DateFilterMode.MONTH, month=month)

    @classmethod
    def for_year(cls, year: Union[int, str]) -> "DateFilter":
        return cls(mode=DateFilterMode.YEAR, year=year)

    @classmethod
    def between(cls, start_date: Optional[DateLike], end_date: Optional[DateLike]) -> "DateFilter":
        return cls(mode=DateFilterMode.RANGE, start_date=start_date, end_date=end_date)

    @property
    def is_active(self) -> bool:
        return self.mode != DateFilterMode.NONE


class FilterSet(BaseModel):
    """One complete set of filter values: search text, date filter and extras.

    Instances are immutable; the ``with_*`` helpers return updated copies.
    ``extra`` keeps its insertion order, which is also the order its entries
    are serialized in.
    """

    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    date_filter: DateFilter = Field(default_factory=DateFilter)
    extra: Dict[str, Any] = Field(default_factory=dict)

    def with_search(self, text: str) -> "FilterSet":
        return self.model_copy(update={"search_text": text})

    def with_date_filter(self, date_filter: DateFilter) -> "FilterSet":
        return self.model_copy(update={"date_filter": date_filter})

    def with_extra(self, key: str, value: Any) -> "FilterSet":
        return self.model_copy(update={"extra": {**self.extra, key: value}})


class PageResult(BaseModel, Generic[T]):
    """One page of a collection, as returned by a list endpoint.

    Wire shape: ``{"data": [...], "total": <int>, "total_pages": <int>}``.
    Missing or null counters fall back to an empty collection with a
    single page.
    """

    data: List[T] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 1

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("total", mode="before")
    @classmethod
    def _null_total(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("total_pages", mode="before")
    @classmethod
    def _at_least_one_page(cls, value: Any) -> Any:
        if value is None:
            return 1
        if isinstance(value, int) and value < 1:
            return 1
        return value

    @property
    def rows(self) -> List[T]:
        return self.data


class PageWindow(BaseModel):
    """Page numbers shown by a pager around the current page."""

    pages: List[int] = Field(default_factory=list)
    show_leading_ellipsis: bool = False
    include_first_page: bool = False
    show_trailing_ellipsis: bool = False
    include_last_page: bool = False
    has_previous: bool = False
    has_next: bool = False

    @property
    def visible(self) -> bool:
        """False when there is at most one page and no pager is needed."""
        return bool(self.pages)
