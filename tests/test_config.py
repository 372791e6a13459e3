"""Tests for CollectionConfig configuration class."""

import pytest
from fsp_collection.config import CollectionConfig
from fsp_collection.models import FilterSet, SortingOrder


class TestCollectionConfig:
    """Tests for CollectionConfig class."""

    def test_default_config(self):
        """Test default configuration values."""
        config = CollectionConfig(endpoint="/participants")

        assert config.endpoint == "/participants"
        assert config.per_page == 15
        assert config.initial_filters == {}
        assert config.initial_sort_by == "created_at"
        assert config.initial_sort_order == SortingOrder.DESC
        assert config.date_field == "created_at"
        assert config.max_visible_pages == 5

    def test_custom_config(self):
        """Test custom configuration values."""
        config = CollectionConfig(
            endpoint="/exams",
            per_page=50,
            initial_filters={"status": "active"},
            initial_sort_by="name",
            initial_sort_order="asc",
            date_field="scheduled_at",
        )

        assert config.per_page == 50
        assert config.initial_filters == {"status": "active"}
        assert config.initial_sort_by == "name"
        assert config.initial_sort_order is SortingOrder.ASC
        assert config.date_field == "scheduled_at"

    def test_empty_endpoint(self):
        """Test that endpoint is required."""
        with pytest.raises(ValueError, match="endpoint must not be empty"):
            CollectionConfig(endpoint="")

    def test_invalid_per_page(self):
        """Test that per_page must be >= 1."""
        with pytest.raises(ValueError, match="per_page must be >= 1"):
            CollectionConfig(endpoint="/items", per_page=0)

    def test_invalid_sort_order(self):
        """Test that the initial sort order must be asc or desc."""
        with pytest.raises(ValueError, match="initial_sort_order must be 'asc' or 'desc'"):
            CollectionConfig(endpoint="/items", initial_sort_order="sideways")

    def test_empty_sort_by(self):
        with pytest.raises(ValueError, match="initial_sort_by must not be empty"):
            CollectionConfig(endpoint="/items", initial_sort_by="")

    def test_empty_date_field(self):
        with pytest.raises(ValueError, match="date_field must not be empty"):
            CollectionConfig(endpoint="/items", date_field="")

    @pytest.mark.parametrize("max_visible", [0, 4, -3])
    def test_invalid_max_visible_pages(self, max_visible):
        """Test that the pager window must be a positive odd size."""
        with pytest.raises(ValueError, match="max_visible_pages must be a positive odd number"):
            CollectionConfig(endpoint="/items", max_visible_pages=max_visible)

    def test_initial_filter_set(self):
        """Test that initial filters become the extras of the starting filter set."""
        config = CollectionConfig(endpoint="/items", initial_filters={"status": "active"})

        filters = config.initial_filter_set()
        assert filters == FilterSet(extra={"status": "active"})

    def test_initial_filter_set_is_a_copy(self):
        """Test that editing a filter set never leaks into the configuration."""
        config = CollectionConfig(endpoint="/items", initial_filters={"status": "active"})

        config.initial_filter_set().with_extra("role", "admin")
        config.initial_filter_set().extra["other"] = "x"
        assert config.initial_filters == {"status": "active"}
