"""Collection controller: filter, sort and paginate a remote collection."""

import logging
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from pydantic import ValidationError

from fsp_collection.config import CollectionConfig
from fsp_collection.errors import FilterValidationError, TransportError
from fsp_collection.models import DateFilter, PageResult, SortingOrder
from fsp_collection.query import build_query_string, serialize_params
from fsp_collection.state import CollectionState, FilterState

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Fetch collaborator used by the controller.

    Implementations raise TransportError with a user-facing message on failure.
    """

    async def fetch(
        self, endpoint: str, query_string: str
    ) -> Union[PageResult[Any], Mapping[str, Any]]: ...


def _error_message(exc: Exception) -> str:
    if isinstance(exc, TransportError):
        return exc.message
    if isinstance(exc, ValidationError):
        return "Invalid response payload"
    return str(exc) or "Failed to load data"


class CollectionController:
    """
    Collection State Manager.

    Tracks pagination, sorting and filters for one list endpoint and keeps
    the fetched page in :attr:`state`. Filter edits are staged in the live
    filters and only reach the server through :meth:`apply_filters`.

    Every fetch is tagged with a generation token when it is dispatched.
    Only the response of the most recently issued fetch may update the
    state; older responses are discarded when they arrive.

    Actions never raise. Failures end up in ``state.error`` (transport) or
    ``state.validation_error`` (rejected filters).

    Example:
        async with CollectionController(fetcher, CollectionConfig("/participants")) as ctl:
            ctl.edit_search("alice")
            await ctl.apply_filters()
            await ctl.set_sort("name")
            print(ctl.state.rows)
    """

    def __init__(self, fetcher: Fetcher, config: CollectionConfig):
        """
        Initialize CollectionController.

        Args:
            fetcher: Fetch collaborator
            config: Endpoint and initial query configuration
        """
        self.fetcher = fetcher
        self.config = config
        self._initial_filters = config.initial_filter_set()
        self._generation = 0
        self._closed = False
        self.state = CollectionState(
            per_page=config.per_page,
            sort_by=config.initial_sort_by,
            sort_order=config.initial_sort_order,
            filters=FilterState.initial(self._initial_filters),
        )

    @property
    def generation(self) -> int:
        """Token of the most recently dispatched fetch."""
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    # --- Lifecycle ---

    async def start(self) -> None:
        """Issue the initial fetch."""
        await self._fetch()

    def close(self) -> None:
        """Tear the controller down; responses still in flight are discarded."""
        self._closed = True
        self.state.loading = False

    async def __aenter__(self) -> "CollectionController":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Actions ---

    async def set_page(self, page: int) -> None:
        """Go to ``page``. Out-of-range pages are re-clamped by the response."""
        self.state.current_page = max(1, page)
        await self._fetch()

    async def set_sort(
        self, field: str, order: Optional[Union[SortingOrder, str]] = None
    ) -> None:
        """
        Sort by ``field``.

        Without an explicit order, sorting by the current field toggles the
        direction and a new field starts ascending. An order other than
        ``asc``/``desc`` is rejected into ``state.validation_error`` and the
        sort is left unchanged.
        """
        if order is None:
            if field == self.state.sort_by:
                order = self.state.sort_order.toggled()
            else:
                order = SortingOrder.ASC
        try:
            order = SortingOrder(order)
        except ValueError:
            logger.info("Rejected sort order %r for %s", order, self.config.endpoint)
            self.state.validation_error = (
                f"Invalid sort order: {order!r}. Expected 'asc' or 'desc'"
            )
            return

        self.state.sort_by = field
        self.state.sort_order = order
        await self._fetch()

    def edit_search(self, text: str) -> None:
        self.state.filters = self.state.filters.edit_search(text)

    def edit_date_filter(self, date_filter: DateFilter) -> None:
        self.state.filters = self.state.filters.edit_date_filter(date_filter)

    def edit_extra(self, key: str, value: Any) -> None:
        self.state.filters = self.state.filters.edit_extra(key, value)

    async def apply_filters(self) -> bool:
        """
        Commit the live filters and reload from page 1.

        Returns:
            bool: False if the live filters were rejected and no request was issued
        """
        try:
            filters = self.state.filters.apply()
        except FilterValidationError as e:
            logger.info("Rejected filters for %s: %s", self.config.endpoint, e)
            self.state.validation_error = str(e)
            return False

        self.state.filters = filters
        self.state.validation_error = None
        self.state.current_page = 1
        await self._fetch()
        return True

    async def clear_filters(self) -> None:
        """Restore the initial filters (live and committed) and reload from page 1."""
        self.state.filters = self.state.filters.clear(self._initial_filters)
        self.state.validation_error = None
        self.state.current_page = 1
        await self._fetch()

    async def refresh(self) -> None:
        """Re-run the current query unchanged."""
        await self._fetch()

    # --- Fetching ---

    def query_string(self) -> str:
        """Serialized query for the current page, sort and committed filters."""
        state = self.state
        params = serialize_params(
            page=state.current_page,
            per_page=state.per_page,
            sort_by=state.sort_by,
            sort_order=state.sort_order,
            filters=state.committed_filters,
            date_field=self.config.date_field,
        )
        return build_query_string(params)

    def _is_current(self, token: int) -> bool:
        return not self._closed and token == self._generation

    async def _fetch(self) -> None:
        if self._closed:
            logger.debug("Ignoring fetch of closed controller for %s", self.config.endpoint)
            return
        self._generation += 1
        token = self._generation
        self.state.loading = True
        self.state.error = None

        query_string = self.query_string()
        logger.debug("Fetching %s?%s (generation %d)", self.config.endpoint, query_string, token)

        try:
            payload = await self.fetcher.fetch(self.config.endpoint, query_string)
            result = PageResult.model_validate(payload)
        except Exception as e:
            if not self._is_current(token):
                logger.debug("Discarding failed response of superseded generation %d", token)
                return
            message = _error_message(e)
            if isinstance(e, (TransportError, ValidationError)):
                logger.warning("Fetching %s failed: %s", self.config.endpoint, message)
            else:
                logger.exception("Fetch collaborator raised for %s", self.config.endpoint)
            self._commit_failure(message)
            return

        if not self._is_current(token):
            logger.debug("Discarding response of superseded generation %d", token)
            return
        self._commit_result(result)

    def _commit_result(self, result: PageResult[Any]) -> None:
        state = self.state
        state.rows = list(result.rows)
        state.total = result.total
        state.total_pages = result.total_pages
        if state.current_page > state.total_pages:
            state.current_page = state.total_pages
        state.loading = False
        state.stale = False

    def _commit_failure(self, message: str) -> None:
        # Rows from the last successful fetch stay visible.
        state = self.state
        state.error = message
        state.loading = False
        state.stale = bool(state.rows)


def controller_factory(
    endpoint: str, fetcher: Fetcher, **overrides: Any
) -> Callable[[], CollectionController]:
    """
    Build a constructor for controllers of one endpoint.

    Each call returns a fresh controller, so every consuming view owns its
    own state.

    Args:
        endpoint: List endpoint path
        fetcher: Fetch collaborator shared by the created controllers
        **overrides: Other CollectionConfig fields

    Returns:
        Callable[[], CollectionController]: Controller constructor
    """
    config = CollectionConfig(endpoint=endpoint, **overrides)

    def create() -> CollectionController:
        return CollectionController(fetcher, config)

    return create
