"""Fetch complete Shopify collections page by page.

Shopify's REST listings cap a page at 250 items and page forward with
``since_id``.  The total is only requested when the first page is full,
so small collections cost a single request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 250


def fetch_all(
    fetch_page: Callable[[int], list[dict[str, Any]]],
    fetch_count: Callable[[], int],
    page_size: int = MAX_PAGE_SIZE,
) -> list[dict[str, Any]]:
    """Collect every item of a ``since_id``-paged collection.

    Args:
        fetch_page: Returns the page of items with ``id`` > its argument.
        fetch_count: Returns the collection's total size.
        page_size: Page size the listing was requested with.

    Returns:
        All items, in fetch order.
    """
    items: list[dict[str, Any]] = []
    count: int | None = None

    while count is None or len(items) < count:
        since_id = max((item.get("id") or 0 for item in items), default=0)
        page = fetch_page(since_id)
        if count is None:
            count = len(page) if len(page) < page_size else fetch_count()
        elif not page:
            logger.warning(
                "Listing stopped early: got %d of %d item(s)",
                len(items),
                count,
            )
            break
        items.extend(page)

    return items
