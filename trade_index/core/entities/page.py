"""
Paging primitives: the cursor/limit/order triple a caller asks for and the
HAL envelope a page of trades is returned in.
"""
from typing import List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

from trade_index.core.entities.trade import Link, TradeResource
from trade_index.core.errors import InvalidParamError

Order = Literal["asc", "desc"]

MAX_INT64 = 2**63 - 1


class PageQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    cursor: str = ""
    limit: int = Field(gt=0)
    order: Order = "asc"

    @classmethod
    def from_params(
        cls,
        cursor: str = "",
        limit: str = "",
        order: str = "",
        default_limit: int = 10,
        max_limit: int = 200,
    ) -> "PageQuery":
        order = order or "asc"
        if order not in ("asc", "desc"):
            raise InvalidParamError("order", "must be 'asc' or 'desc'")

        if limit == "" or limit is None:
            parsed_limit = default_limit
        else:
            try:
                parsed_limit = int(limit)
            except (TypeError, ValueError):
                raise InvalidParamError("limit", "not an integer")
        if parsed_limit < 1:
            raise InvalidParamError("limit", "must be positive")
        if parsed_limit > max_limit:
            raise InvalidParamError("limit", f"must be <= {max_limit}")

        query = cls(cursor=cursor or "", limit=parsed_limit, order=order)
        # Decode once so malformed cursors fail while parsing params
        query.cursor_position()
        return query

    def cursor_position(self) -> Tuple[int, int]:
        """
        Decodes the cursor into an (operation id, effect order) pair. An empty
        cursor starts at the oldest record for asc and the newest for desc;
        "now" always means the newest.
        """
        if self.cursor == "now" or (self.cursor == "" and self.order == "desc"):
            return (MAX_INT64, MAX_INT64)
        if self.cursor == "":
            return (0, 0)

        parts = self.cursor.split("-")
        if len(parts) != 2:
            raise InvalidParamError("cursor", f"'{self.cursor}' is not of the form <operation>-<order>")
        try:
            op_id, order = int(parts[0]), int(parts[1])
        except ValueError:
            raise InvalidParamError("cursor", f"'{self.cursor}' is not of the form <operation>-<order>")
        if op_id < 0 or order < 0:
            raise InvalidParamError("cursor", "must not be negative")
        return (op_id, order)

    @property
    def inverted_order(self) -> Order:
        return "desc" if self.order == "asc" else "asc"


class PageLinks(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    self_link: Link = Field(alias="self")
    next: Link
    prev: Link


class Page(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[TradeResource]
    base_url: str
    base_path: str
    limit: int
    cursor: str
    order: Order
    links: PageLinks

    def to_hal(self) -> dict:
        return {
            "_links": self.links.model_dump(mode="json", by_alias=True),
            "_embedded": {"records": [r.to_hal() for r in self.records]},
        }
