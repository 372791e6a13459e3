"""fsp-collection: browse a filtered, sorted and paginated remote collection."""

from . import models as models  # noqa: F401
from .config import CollectionConfig  # noqa: F401
from .controller import CollectionController, Fetcher, controller_factory  # noqa: F401
from .dates import date_params, resolve_date_range, validate_date_filter  # noqa: F401
from .errors import CollectionError, FilterValidationError, TransportError  # noqa: F401
from .models import (  # noqa: F401
    DateFilter,
    DateFilterMode,
    FilterSet,
    PageResult,
    PageWindow,
    SortingOrder,
)
from .presets import DatePresets  # noqa: F401
from .query import QUERY_KEYS, build_query_string, serialize_params  # noqa: F401
from .server import ListQuery, ListQueryEngine, parse_list_query  # noqa: F401
from .state import CollectionState, FilterState  # noqa: F401
from .table import (  # noqa: F401
    CollectionTable,
    Column,
    TableView,
    TableViewKind,
    cell_value,
    render_table,
    resolve_path,
)
from .transport import HttpFetcher  # noqa: F401
from .window import calculate_page_window  # noqa: F401

__all__ = [
    # Controller
    "CollectionController",
    "Fetcher",
    "controller_factory",
    # State
    "CollectionState",
    "FilterState",
    # Configuration
    "CollectionConfig",
    # Serialization
    "serialize_params",
    "build_query_string",
    "QUERY_KEYS",
    "date_params",
    "validate_date_filter",
    "resolve_date_range",
    # Paging and rendering
    "calculate_page_window",
    "render_table",
    "resolve_path",
    "cell_value",
    "Column",
    "CollectionTable",
    "TableView",
    "TableViewKind",
    # Transport
    "HttpFetcher",
    # Server side
    "ListQuery",
    "ListQueryEngine",
    "parse_list_query",
    # Presets
    "DatePresets",
    # Errors
    "CollectionError",
    "FilterValidationError",
    "TransportError",
    # Models
    "DateFilter",
    "DateFilterMode",
    "FilterSet",
    "PageResult",
    "PageWindow",
    "SortingOrder",
    # Module
    "models",
]
