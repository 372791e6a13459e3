"""Tabular rendering contract: cell lookup, sort indicators and view states."""

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fsp_collection.controller import CollectionController
from fsp_collection.models import PageWindow, SortingOrder
from fsp_collection.window import calculate_page_window


class Column(BaseModel):
    """
    Table column.

    Cells are produced by ``render`` when given, otherwise by a dotted-path
    lookup of ``key`` into the row (``"participant.name"``).
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str = ""
    sortable: bool = False
    render: Optional[Callable[[Any], Any]] = None

    @property
    def title(self) -> str:
        return self.label or self.key


class SortIndicator(StrEnum):
    """Sort state shown on a sortable column header"""

    ASC = "asc"
    DESC = "desc"
    UNSORTED = "unsorted"


class TableViewKind(StrEnum):
    """What a table shows"""

    LOADING = "loading"  # first load, nothing to show yet
    ERROR = "error"  # failed with nothing to show; offers a retry
    EMPTY = "empty"  # loaded, no rows
    ROWS = "rows"


class HeaderCell(BaseModel):
    key: str
    label: str
    sortable: bool
    indicator: Optional[SortIndicator] = None


class TableView(BaseModel):
    """Renderable snapshot of a table."""

    kind: TableViewKind
    headers: List[HeaderCell] = Field(default_factory=list)
    cells: List[List[Any]] = Field(default_factory=list)
    error: Optional[str] = None
    retryable: bool = False
    message: Optional[str] = None


def path_segments(key: str) -> List[str]:
    return key.split(".")


def resolve_path(node: Any, segments: Sequence[str]) -> Any:
    """
    Resolve a path of keys in a tree of mappings and sequences.

    Integer segments index into sequences. Returns None as soon as a
    segment is missing instead of raising.

    Args:
        node: Row or nested value
        segments: Remaining path segments

    Returns:
        Any: The value at the path, or None
    """
    if not segments:
        return node
    head, rest = segments[0], segments[1:]
    if isinstance(node, Mapping):
        if head not in node:
            return None
        return resolve_path(node[head], rest)
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
        try:
            return resolve_path(node[int(head)], rest)
        except (ValueError, IndexError):
            return None
    return None


def cell_value(row: Any, column: Column) -> Any:
    """Value of one cell; missing values render as an empty string."""
    if column.render is not None:
        value = column.render(row)
    else:
        value = resolve_path(row, path_segments(column.key))
    return "" if value is None else value


def _header(column: Column, sort_by: Optional[str], sort_order: SortingOrder) -> HeaderCell:
    indicator = None
    if column.sortable:
        if column.key == sort_by:
            indicator = SortIndicator(str(SortingOrder(sort_order)))
        else:
            indicator = SortIndicator.UNSORTED
    return HeaderCell(
        key=column.key, label=column.title, sortable=column.sortable, indicator=indicator
    )


def render_table(
    columns: Sequence[Column],
    rows: Sequence[Any],
    loading: bool = False,
    error: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: SortingOrder = SortingOrder.DESC,
    empty_message: str = "No data found",
) -> TableView:
    """
    Build the view of a table.

    Placeholders are only shown while there are no rows: rows from an
    earlier fetch stay visible during a reload or after a failed one.

    Args:
        columns: Table columns
        rows: Current page's rows
        loading: A fetch is in flight
        error: Last fetch error
        sort_by: Field currently sorted on
        sort_order: Current sorting order
        empty_message: Message shown for an empty collection

    Returns:
        TableView: Table snapshot
    """
    if not rows:
        if loading:
            return TableView(kind=TableViewKind.LOADING, message="Loading data...")
        if error:
            return TableView(kind=TableViewKind.ERROR, error=error, retryable=True)

    headers = [_header(column, sort_by, sort_order) for column in columns]
    if not rows:
        return TableView(kind=TableViewKind.EMPTY, headers=headers, message=empty_message)

    return TableView(
        kind=TableViewKind.ROWS,
        headers=headers,
        cells=[[cell_value(row, column) for column in columns] for row in rows],
        error=error,
    )


class CollectionTable:
    """
    Binds table columns to a CollectionController.

    Header, pager and retry clicks are routed to the controller, which owns
    all state; the table itself keeps none.
    """

    def __init__(
        self,
        controller: CollectionController,
        columns: Sequence[Column],
        empty_message: str = "No data found",
    ):
        self.controller = controller
        self.columns = list(columns)
        self.empty_message = empty_message
        self._columns_by_key = {column.key: column for column in self.columns}

    def view(self) -> TableView:
        state = self.controller.state
        return render_table(
            self.columns,
            state.rows,
            loading=state.loading,
            error=state.error,
            sort_by=state.sort_by,
            sort_order=state.sort_order,
            empty_message=self.empty_message,
        )

    def pager(self) -> PageWindow:
        state = self.controller.state
        return calculate_page_window(
            state.current_page,
            state.total_pages,
            self.controller.config.max_visible_pages,
        )

    async def on_header_click(self, key: str) -> bool:
        """Sort by the clicked column; returns False for non-sortable columns."""
        column = self._columns_by_key.get(key)
        if column is None or not column.sortable:
            return False
        await self.controller.set_sort(column.key)
        return True

    async def on_page_click(self, page: int) -> None:
        await self.controller.set_page(page)

    async def on_retry(self) -> None:
        await self.controller.refresh()
