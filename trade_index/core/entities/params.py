import logging
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from trade_index import config
from trade_index.core.entities.asset import Asset
from trade_index.core.entities.page import PageQuery
from trade_index.core.errors import InvalidParamError

logger = logging.getLogger(__name__)


class TradeIndexParams(BaseModel):
    """
    Filters and paging for one trade listing request. `selling` and `buying`
    are either both set or both None.
    """
    model_config = ConfigDict(frozen=True)

    account_filter: str = ""
    selling: Optional[Asset] = None
    buying: Optional[Asset] = None
    page_query: PageQuery

    @property
    def has_order_book(self) -> bool:
        return self.selling is not None and self.buying is not None

    @classmethod
    def from_request(cls, query: Mapping[str, str], account_id: Optional[str] = None) -> "TradeIndexParams":
        selling = _get_asset(query, "selling_")
        buying = _get_asset(query, "buying_")

        # Half an order book is ambiguous; serve the unfiltered listing instead
        if (selling is None) != (buying is None):
            given = "selling" if selling is not None else "buying"
            logger.warning(f"Only the {given} asset was supplied; ignoring order book filter")
            selling = buying = None

        page_query = PageQuery.from_params(
            cursor=query.get("cursor", ""),
            limit=query.get("limit", ""),
            order=query.get("order", ""),
            default_limit=config.DEFAULT_PAGE_LIMIT,
            max_limit=config.MAX_PAGE_LIMIT,
        )

        return cls(
            account_filter=account_id or query.get("account_id", ""),
            selling=selling,
            buying=buying,
            page_query=page_query,
        )


def _get_asset(query: Mapping[str, str], prefix: str) -> Optional[Asset]:
    asset_type = query.get(f"{prefix}asset_type", "")
    if not asset_type:
        return None
    try:
        return Asset(
            asset_type=asset_type,
            code=query.get(f"{prefix}asset_code") or None,
            issuer=query.get(f"{prefix}asset_issuer") or None,
        )
    except ValidationError as e:
        reason = "; ".join(err["msg"] for err in e.errors())
        raise InvalidParamError(f"{prefix}asset_type", reason)
