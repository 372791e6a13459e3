"""Page window calculation for pagers."""

from fsp_collection.models import PageWindow

DEFAULT_MAX_VISIBLE = 5


def calculate_page_window(
    current_page: int, total_pages: int, max_visible: int = DEFAULT_MAX_VISIBLE
) -> PageWindow:
    """
    Calculate the contiguous page numbers shown around the current page.

    The window is centered on ``current_page`` and slid left when it hits
    the last page. The first and last pages are shown outside the window
    when it does not reach them, with an ellipsis when there is a gap.

    Args:
        current_page: Current page number
        total_pages: Total number of pages reported by the server
        max_visible: Window size, a positive odd number (default: 5)

    Returns:
        PageWindow: Window pages and ellipsis flags. Empty when total_pages <= 1.

    Raises:
        ValueError: If max_visible is not a positive odd number
    """
    if max_visible < 1 or max_visible % 2 == 0:
        raise ValueError("max_visible must be a positive odd number")

    if total_pages <= 1:
        return PageWindow()

    start = max(1, current_page - max_visible // 2)
    end = min(total_pages, start + max_visible - 1)
    if end - start < max_visible - 1:
        start = max(1, end - max_visible + 1)

    return PageWindow(
        pages=list(range(start, end + 1)),
        show_leading_ellipsis=start > 2,
        include_first_page=start > 1,
        show_trailing_ellipsis=end < total_pages - 1,
        include_last_page=end < total_pages,
        has_previous=current_page > 1,
        has_next=current_page < total_pages,
    )
