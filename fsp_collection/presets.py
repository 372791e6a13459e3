"""Common date filter presets."""

from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from fsp_collection.models import DateFilter


class DatePresets:
    """
    Pre-defined date filters for frequently used periods.

    Example usage:
        from fsp_collection.presets import DatePresets

        controller.edit_date_filter(DatePresets.last_days(7))
        await controller.apply_filters()
    """

    @staticmethod
    def today(reference_time: datetime = None) -> DateFilter:
        """
        Filter for records of the reference day.

        Args:
            reference_time: Reference time for calculation (default: now)

        Returns:
            DateFilter: Exact-day filter
        """
        if reference_time is None:
            reference_time = datetime.now()
        return DateFilter.exact(reference_time.date())

    @staticmethod
    def this_month(reference_time: datetime = None) -> DateFilter:
        """Filter for records of the reference month."""
        if reference_time is None:
            reference_time = datetime.now()
        return DateFilter.for_month(reference_time.strftime("%Y-%m"))

    @staticmethod
    def previous_month(reference_time: datetime = None) -> DateFilter:
        """Filter for records of the month before the reference month."""
        if reference_time is None:
            reference_time = datetime.now()
        previous = reference_time - relativedelta(months=1)
        return DateFilter.for_month(previous.strftime("%Y-%m"))

    @staticmethod
    def this_year(reference_time: datetime = None) -> DateFilter:
        """Filter for records of the reference year."""
        if reference_time is None:
            reference_time = datetime.now()
        return DateFilter.for_year(reference_time.year)

    @staticmethod
    def last_days(days: int = 30, reference_time: datetime = None) -> DateFilter:
        """
        Filter for records of the last N days, the reference day included.

        Args:
            days: Number of days, >= 1 (default: 30)
            reference_time: Reference time for calculation (default: now)

        Returns:
            DateFilter: Range filter

        Raises:
            ValueError: If days is less than 1
        """
        if days < 1:
            raise ValueError("days must be >= 1")
        if reference_time is None:
            reference_time = datetime.now()
        end = reference_time.date()
        return DateFilter.between(end - timedelta(days=days - 1), end)
