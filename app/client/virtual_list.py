"""
Windowing for an infinitely scrolling list.

Only the items inside the viewport, plus `overscan` items on each side, are
rendered. When the rendered window gets within `threshold` items of the end
of what is loaded, the next page is requested once.
"""

import logging
import math
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class VirtualWindow:
    """
    Args:
        viewport_height: Visible height of the scroll container
        item_height: Fixed (or estimated) height of one row
        overscan: Extra rows rendered above and below the viewport
        threshold: Trigger distance, in items, from the end of the loaded list
    """

    def __init__(self, viewport_height: float, item_height: float, overscan: int = 5, threshold: int = 5):
        if item_height <= 0:
            raise ValueError("item_height must be positive")
        self.viewport_height = viewport_height
        self.item_height = item_height
        self.overscan = overscan
        self.threshold = threshold

        self.last_triggered_index: Optional[int] = None
        self._last_total: Optional[int] = None

    def visible_range(self, scroll_offset: float, total_count: int) -> Tuple[int, int]:
        """Return (start, end) item indices to render; `end` is exclusive."""
        if total_count <= 0:
            return 0, 0

        first_visible = max(0, int(scroll_offset // self.item_height))
        visible_count = math.ceil(self.viewport_height / self.item_height)

        end = min(total_count, first_visible + visible_count + self.overscan)
        start = min(max(0, first_visible - self.overscan), end)
        return start, end

    def total_height(self, total_count: int) -> float:
        """Height of the scrollable content for `total_count` rows."""
        return total_count * self.item_height

    def reset(self) -> None:
        """Forget the last trigger so the next threshold crossing fetches again."""
        self.last_triggered_index = None

    def on_scroll(
        self,
        scroll_offset: float,
        total_count: int,
        *,
        has_next_page: bool,
        is_fetching: bool,
        fetch: Callable[[], object]
    ) -> bool:
        """
        Call `fetch` if the window reached the end of the loaded items.

        Fires at most once per threshold crossing: the trigger marker is only
        cleared when `total_count` changes (a page arrived or the list reset).
        Returns True when `fetch` was called.
        """
        if total_count != self._last_total:
            self._last_total = total_count
            self.last_triggered_index = None

        if not has_next_page or is_fetching:
            return False

        _, end = self.visible_range(scroll_offset, total_count)
        last_index = end - 1
        if last_index < total_count - 1 - self.threshold:
            return False

        if self.last_triggered_index is not None:
            return False

        self.last_triggered_index = last_index
        logger.debug(f"Fetching next page at index {last_index} of {total_count}")
        fetch()
        return True
