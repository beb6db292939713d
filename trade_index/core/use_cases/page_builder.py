from typing import Sequence
from urllib.parse import urlencode

from trade_index.core.entities.page import Order, Page, PageLinks, PageQuery
from trade_index.core.entities.trade import Link, TradeResource


def _link(base_url: str, base_path: str, order: Order, limit: int, cursor: str) -> Link:
    query = urlencode({"order": order, "limit": limit, "cursor": cursor})
    return Link(href=f"{base_url.rstrip('/')}{base_path}?{query}")


def build_page(
    records: Sequence[TradeResource],
    page_query: PageQuery,
    base_url: str,
    base_path: str,
) -> Page:
    """
    Wraps already ordered records in a page envelope. `next` continues after
    the last record in the same order, `prev` walks back from the first one
    in the inverted order. An empty page keeps the request cursor for both.
    """
    limit, order = page_query.limit, page_query.order

    if records:
        next_cursor = records[-1].paging_token
        prev_cursor = records[0].paging_token
    else:
        next_cursor = prev_cursor = page_query.cursor

    links = PageLinks(
        self_link=_link(base_url, base_path, order, limit, page_query.cursor),
        next=_link(base_url, base_path, order, limit, next_cursor),
        prev=_link(base_url, base_path, page_query.inverted_order, limit, prev_cursor),
    )

    return Page(
        records=list(records),
        base_url=base_url,
        base_path=base_path,
        limit=limit,
        cursor=page_query.cursor,
        order=order,
        links=links,
    )
