"""Collection state: filter transitions and the per-controller state record."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fsp_collection.dates import validate_date_filter
from fsp_collection.models import DateFilter, FilterSet, SortingOrder


class FilterState(BaseModel):
    """
    Live and committed filters as one immutable value.

    ``live`` holds what the user is editing; ``committed`` what the last
    query was issued with. The only ways to change ``committed`` are
    :meth:`apply` and :meth:`clear`.
    """

    model_config = ConfigDict(frozen=True)

    live: FilterSet = Field(default_factory=FilterSet)
    committed: FilterSet = Field(default_factory=FilterSet)

    @classmethod
    def initial(cls, filters: FilterSet) -> "FilterState":
        return cls(live=filters, committed=filters)

    def edit_search(self, text: str) -> "FilterState":
        return self.model_copy(update={"live": self.live.with_search(text)})

    def edit_date_filter(self, date_filter: DateFilter) -> "FilterState":
        return self.model_copy(update={"live": self.live.with_date_filter(date_filter)})

    def edit_extra(self, key: str, value: Any) -> "FilterState":
        return self.model_copy(update={"live": self.live.with_extra(key, value)})

    def apply(self) -> "FilterState":
        """
        Commit the live filters.

        Returns:
            FilterState: New state with committed == live

        Raises:
            FilterValidationError: If the live date filter is incomplete or malformed
        """
        validate_date_filter(self.live.date_filter)
        return self.model_copy(update={"committed": self.live})

    def clear(self, initial: FilterSet) -> "FilterState":
        """Reset both live and committed filters to ``initial``."""
        return FilterState.initial(initial)

    @property
    def has_pending_edits(self) -> bool:
        return self.live != self.committed


class CollectionState(BaseModel):
    """State of one browsed collection, owned by a single controller."""

    rows: List[Any] = Field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    stale: bool = False
    validation_error: Optional[str] = None

    current_page: int = Field(1, ge=1)
    per_page: int = Field(15, gt=0)
    total: int = Field(0, ge=0)
    total_pages: int = Field(1, ge=1)

    sort_by: str = "created_at"
    sort_order: SortingOrder = SortingOrder.DESC

    filters: FilterState = Field(default_factory=FilterState)

    @property
    def live_filters(self) -> FilterSet:
        return self.filters.live

    @property
    def committed_filters(self) -> FilterSet:
        return self.filters.committed
