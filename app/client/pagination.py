"""Page-number range for a numbered pagination control."""

import math
from typing import List, Union

DOTS = "..."

PageItem = Union[int, str]


def pagination_range(
    total_items: int,
    page_size: int,
    current_page: int,
    sibling_count: int = 1
) -> List[PageItem]:
    """
    Pages to render, with "..." standing in for skipped runs.

    The first and last page are always shown, plus `sibling_count` pages on
    each side of the current one:

    >>> pagination_range(100, 10, 5)
    [1, '...', 4, 5, 6, '...', 10]
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    total_pages = max(1, math.ceil(total_items / page_size))
    current_page = min(max(current_page, 1), total_pages)

    # first + last + current + 2 dots + siblings on both sides
    total_page_numbers = sibling_count * 2 + 5
    if total_page_numbers >= total_pages:
        return list(range(1, total_pages + 1))

    left_sibling = max(current_page - sibling_count, 1)
    right_sibling = min(current_page + sibling_count, total_pages)

    show_left_dots = left_sibling > 2
    show_right_dots = right_sibling < total_pages - 2

    if not show_left_dots and show_right_dots:
        left_count = 3 + 2 * sibling_count
        return list(range(1, left_count + 1)) + [DOTS, total_pages]

    if show_left_dots and not show_right_dots:
        right_count = 3 + 2 * sibling_count
        return [1, DOTS] + list(range(total_pages - right_count + 1, total_pages + 1))

    return [1, DOTS] + list(range(left_sibling, right_sibling + 1)) + [DOTS, total_pages]
