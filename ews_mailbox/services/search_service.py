"""SearchService - filter composition and paged item searches."""

import logging
import operator
import socket
from functools import reduce
from typing import Any, Callable, List, Optional

from exchangelib import Q
from exchangelib.errors import ErrorTimeoutExpired
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.item_types import get_item_type_info
from ..models import ItemSearchRequest
from ..utils import parse_datetime_tz_aware
from .folder_service import FolderService

DEFAULT_PAGE_SIZE = 100


def build_item_filters(
    item_type,
    subject: Optional[str] = None,
    address: Optional[str] = None,
    start=None,
    end=None,
) -> List[Q]:
    """
    Build one Q per requested criterion.

    Date bounds must already be timezone aware. The range is half open:
    start is inclusive, end is exclusive.
    """
    info = get_item_type_info(item_type)
    filters = []

    if subject:
        filters.append(Q(**{f"{info.subject_field}__contains": subject}))

    if address:
        if not info.address_field:
            raise ValueError(f"address filter is not supported for {info.item_type.value} items")
        filters.append(Q(**{f"{info.address_field}__contains": address}))

    if start is not None:
        filters.append(Q(**{f"{info.date_field}__gte": start}))

    if end is not None:
        filters.append(Q(**{f"{info.date_field}__lt": end}))

    return filters


def combine_filters(filters: List[Q]) -> Optional[Q]:
    """None for no filters, the filter itself for one, a logical AND for several."""
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]
    return reduce(operator.and_, filters)


def paginate(
    fetch_page: Callable[[int, int], List[Any]],
    limit: Optional[int],
    page_size: int = DEFAULT_PAGE_SIZE,
) -> List[Any]:
    """
    Collect results page by page.

    ``fetch_page(offset, count)`` returns at most ``count`` items starting at
    ``offset``. Paging stops once ``limit`` items are collected (``None`` means
    no cap) or when a page comes back shorter than requested.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    results: List[Any] = []
    offset = 0
    while limit is None or len(results) < limit:
        count = page_size if limit is None else min(page_size, limit - len(results))
        page = list(fetch_page(offset, count))
        results.extend(page[:count])
        if len(page) < count:
            break
        offset += len(page)
    return results


class SearchService:
    """
    Service for searching items in one mailbox.

    Handles folder resolution, filter construction and paging.
    """

    def __init__(self, account, page_size: int = DEFAULT_PAGE_SIZE):
        """
        Initialize SearchService.

        Args:
            account: exchangelib Account of the mailbox
            page_size: Items fetched per FindItem call
        """
        self.account = account
        self.page_size = page_size
        self.folders = FolderService(account)
        self.logger = logging.getLogger(__name__)

    def build_query(self, folder: Any, request: ItemSearchRequest, only_fields: Optional[List[str]] = None):
        """Build the QuerySet for ``request`` against ``folder``."""
        info = get_item_type_info(request.item_type)
        tz = getattr(self.account, "default_timezone", None)

        start = parse_datetime_tz_aware(request.start_date, tz) if request.start_date else None
        end = parse_datetime_tz_aware(request.end_date, tz) if request.end_date else None

        restriction = combine_filters(build_item_filters(
            request.item_type,
            subject=request.subject,
            address=request.address,
            start=start,
            end=end,
        ))

        query = folder.all() if restriction is None else folder.filter(restriction)
        query = query.order_by(f"-{info.date_field}")
        if only_fields:
            query = query.only(*only_fields)
        return query

    def search(self, request: ItemSearchRequest, only_fields: Optional[List[str]] = None):
        """
        Run a search.

        Returns:
            (folder, items) tuple
        """
        info = get_item_type_info(request.item_type)
        folder = self.folders.resolve_folder(request.folder, default=info.default_folder)
        query = self.build_query(folder, request, only_fields)

        @retry(
            stop=stop_after_attempt(2),
            wait=wait_exponential(multiplier=2, min=4, max=10),
            retry=retry_if_exception_type((ErrorTimeoutExpired, socket.timeout)),
            reraise=True,
        )
        def fetch_page(offset: int, count: int) -> List[Any]:
            self.logger.debug(f"Fetching items {offset}-{offset + count - 1}")
            return list(query[offset:offset + count])

        items = paginate(fetch_page, request.limit, self.page_size)
        self.logger.info(
            f"Found {len(items)} {info.item_type.value} item(s) in '{getattr(folder, 'name', '?')}'"
        )
        return folder, items
