"""Configuration classes for fsp-collection."""

from dataclasses import dataclass, field
from typing import Any, Dict

from fsp_collection.models import FilterSet, SortingOrder


@dataclass
class CollectionConfig:
    """
    Configuration for a CollectionController.

    Attributes:
        endpoint: List endpoint path, e.g. "/participants"
        per_page: Items per page (default: 15)
        initial_filters: Extra filters every query starts with and that
            clearing restores (default: none)
        initial_sort_by: Field sorted on until the user picks another (default: "created_at")
        initial_sort_order: Initial sorting order (default: "desc")
        date_field: Server-side field the date filter applies to (default: "created_at")
        max_visible_pages: Size of the pager's page window, odd (default: 5)

    Example:
        config = CollectionConfig(
            endpoint="/participants",
            per_page=25,
            initial_filters={"status": "active"},
            initial_sort_by="name",
            initial_sort_order="asc",
        )
    """

    endpoint: str
    per_page: int = 15
    initial_filters: Dict[str, Any] = field(default_factory=dict)
    initial_sort_by: str = "created_at"
    initial_sort_order: SortingOrder = SortingOrder.DESC
    date_field: str = "created_at"
    max_visible_pages: int = 5

    def __post_init__(self):
        """Validate configuration values."""
        if not self.endpoint:
            raise ValueError("endpoint must not be empty")
        if self.per_page < 1:
            raise ValueError("per_page must be >= 1")
        if not self.initial_sort_by:
            raise ValueError("initial_sort_by must not be empty")
        try:
            self.initial_sort_order = SortingOrder(self.initial_sort_order)
        except ValueError as e:
            raise ValueError(
                f"initial_sort_order must be 'asc' or 'desc', got {self.initial_sort_order!r}"
            ) from e
        if not self.date_field:
            raise ValueError("date_field must not be empty")
        if self.max_visible_pages < 1 or self.max_visible_pages % 2 == 0:
            raise ValueError("max_visible_pages must be a positive odd number")

    def initial_filter_set(self) -> FilterSet:
        """Filter set a fresh or cleared controller starts from."""
        return FilterSet(extra=dict(self.initial_filters))
