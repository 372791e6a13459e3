"""Date filter evaluation: validation, query parameters and date ranges."""

import re
from datetime import date, datetime, time, tzinfo
from typing import Any, List, Optional, Tuple

from dateutil.parser import parse
from dateutil.relativedelta import relativedelta

from fsp_collection.errors import FilterValidationError
from fsp_collection.models import DateFilter, DateFilterMode

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
YEAR_PATTERN = re.compile(r"^\d{4}$")

# Keys every date-filtered query may carry, besides the mode and field.
DATE_VALUE_KEYS = ("exact_date", "month", "year", "start_date", "end_date")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_date(value: Any, label: str) -> date:
    """
    Coerce a date-like value to a ``date``.

    Strings are read as ISO dates first, then with dateutil's parser.

    Args:
        value: ``date``, ``datetime`` or string
        label: Name of the field, used in error messages

    Returns:
        date: The coerced date

    Raises:
        FilterValidationError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            try:
                return parse(raw).date()
            except (ValueError, OverflowError):
                pass
    raise FilterValidationError(f"Invalid {label}: {value!r}")


def coerce_month(value: Any) -> str:
    """Coerce a month value to ``YYYY-MM``."""
    if isinstance(value, date):
        return value.strftime("%Y-%m")
    if isinstance(value, str):
        raw = value.strip()
        if MONTH_PATTERN.match(raw) and int(raw[:4]) >= 1 and 1 <= int(raw[5:]) <= 12:
            return raw
    raise FilterValidationError(f"Invalid month: {value!r}. Expected YYYY-MM")


def coerce_year(value: Any) -> str:
    """Coerce a year value to ``YYYY``."""
    if isinstance(value, bool):
        raise FilterValidationError(f"Invalid year: {value!r}. Expected YYYY")
    if isinstance(value, int) and 1 <= value <= 9999:
        return f"{value:04d}"
    if isinstance(value, str) and YEAR_PATTERN.match(value.strip()) and int(value) >= 1:
        return value.strip()
    raise FilterValidationError(f"Invalid year: {value!r}. Expected YYYY")


def _require(value: Any, label: str, mode: DateFilterMode) -> Any:
    if _is_blank(value):
        raise FilterValidationError(f"Date filter mode '{mode}' requires {label}")
    return value


def mode_params(date_filter: DateFilter) -> List[Tuple[str, str]]:
    """
    Build the mode-specific key/value pairs of a date filter.

    Args:
        date_filter: Date filter to evaluate

    Returns:
        List[Tuple[str, str]]: Mode-specific pairs, empty for mode ``none``

    Raises:
        FilterValidationError: If a field required by the mode is missing or malformed,
            or a range ends before it starts
    """
    mode = date_filter.mode
    if mode == DateFilterMode.NONE:
        return []
    if mode == DateFilterMode.EXACT:
        value = _require(date_filter.exact_date, "exact_date", mode)
        return [("exact_date", coerce_date(value, "exact_date").isoformat())]
    if mode == DateFilterMode.MONTH:
        return [("month", coerce_month(_require(date_filter.month, "month", mode)))]
    if mode == DateFilterMode.YEAR:
        return [("year", coerce_year(_require(date_filter.year, "year", mode)))]

    # Open-ended ranges are rejected; both bounds are required.
    if _is_blank(date_filter.start_date) or _is_blank(date_filter.end_date):
        raise FilterValidationError(
            "Date range requires both start_date and end_date"
        )
    start = coerce_date(date_filter.start_date, "start_date")
    end = coerce_date(date_filter.end_date, "end_date")
    if start > end:
        raise FilterValidationError(
            f"Date range start {start.isoformat()} is after end {end.isoformat()}"
        )
    return [("start_date", start.isoformat()), ("end_date", end.isoformat())]


def date_params(date_filter: DateFilter, date_field: str) -> List[Tuple[str, str]]:
    """
    Evaluate a date filter into query key/value pairs.

    Produces ``date_filter_mode`` and ``date_field`` followed by the
    mode-specific keys, or nothing at all when the mode is ``none``.

    Args:
        date_filter: Date filter to evaluate
        date_field: Name of the server-side field the filter applies to

    Returns:
        List[Tuple[str, str]]: Ordered key/value pairs

    Raises:
        FilterValidationError: If the filter is incomplete or malformed
    """
    if not date_filter.is_active:
        return []
    return [
        ("date_filter_mode", str(date_filter.mode)),
        ("date_field", date_field),
        *mode_params(date_filter),
    ]


def validate_date_filter(date_filter: DateFilter) -> None:
    """Raise FilterValidationError if the date filter cannot be committed."""
    mode_params(date_filter)


def resolve_date_range(
    date_filter: DateFilter, tz: Optional[tzinfo] = None
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Convert a date filter into an inclusive datetime range.

    - exact: the whole day
    - month: first instant of the month to the last instant of the month
    - year: January 1st to the last instant of December 31st
    - range: start of the start day to the end of the end day

    Args:
        date_filter: Date filter to resolve
        tz: Time zone attached to both bounds, None for naive bounds

    Returns:
        Tuple[Optional[datetime], Optional[datetime]]: (start, end), both None for mode ``none``

    Raises:
        FilterValidationError: If the filter is incomplete or malformed
    """
    params = dict(mode_params(date_filter))
    mode = date_filter.mode

    if mode == DateFilterMode.EXACT:
        first_day = last_day = date.fromisoformat(params["exact_date"])
    elif mode == DateFilterMode.MONTH:
        first_day = datetime.strptime(params["month"], "%Y-%m").date()
        last_day = first_day + relativedelta(day=31)
    elif mode == DateFilterMode.YEAR:
        year = int(params["year"])
        first_day, last_day = date(year, 1, 1), date(year, 12, 31)
    elif mode == DateFilterMode.RANGE:
        first_day = date.fromisoformat(params["start_date"])
        last_day = date.fromisoformat(params["end_date"])
    else:
        return None, None

    start = datetime.combine(first_day, time.min, tzinfo=tz)
    end = datetime.combine(last_day, time.max, tzinfo=tz)
    return start, end
