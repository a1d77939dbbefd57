"""Drain paginated list endpoints by following ``rel="next"`` links."""
from __future__ import annotations
import logging
import threading
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple, Type, TypeVar

from .rate_limit import RateLimitCategory

if TYPE_CHECKING:
    from .client import OktaClient, OktaResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_pages(
    client: OktaClient,
    path: str,
    model: Type[T],
    category: RateLimitCategory,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[Tuple[List[T], OktaResponse]]:
    """Yield ``(items, response)`` for each page, fetching lazily.

    The cursor for page N+1 is only known once page N is decoded, so pages are
    fetched strictly one after another.
    """
    next_path = path
    page = 0
    while next_path:
        request = client.new_request("GET", next_path)
        resp = client.do(request, category, cancel_event=cancel_event)
        items = resp.decode_list(model)
        page += 1
        logger.debug("Page %d of %s: %d %s(s)", page, path, len(items), model.__name__)
        yield items, resp
        next_path = resp.pagination.next


def paginate(
    client: OktaClient,
    path: str,
    model: Type[T],
    category: RateLimitCategory,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[List[T], OktaResponse]:
    """Fetch every page of a list endpoint.

    Args:
        client: Okta client
        path: First page path, including limit/filter/search query parameters
        model: Model class each array element is decoded into
        category: Rate-limit bucket for every page request
        cancel_event: Stops the drain before the next page request when set

    Returns:
        All items in server order, concatenated across pages, and the last response

    Raises:
        Any error from a page request or decode. Items gathered from earlier
        pages are discarded; a partial list is never returned.
    """
    acc: List[T] = []
    last_resp = None
    for items, resp in iter_pages(client, path, model, category, cancel_event):
        acc.extend(items)
        last_resp = resp
    return acc, last_resp
