from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    model_config = ConfigDict(frozen=True)

    href: str


class TradeLinks(BaseModel):
    model_config = ConfigDict(frozen=True)

    seller: Link
    buyer: Link


class TradeResource(BaseModel):
    """
    A trade as returned by the API: the trade effect joined with the close
    time of the ledger that recorded it.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "_links": {
                    "seller": {"href": "https://horizon.example/accounts/GSELLER"},
                    "buyer": {"href": "https://horizon.example/accounts/GBUYER"},
                },
                "id": "42949676033-1",
                "paging_token": "42949676033-1",
                "offer_id": 7,
                "seller": "GSELLER",
                "sold_amount": "10.0000000",
                "sold_asset_type": "native",
                "buyer": "GBUYER",
                "bought_amount": "2.5000000",
                "bought_asset_type": "credit_alphanum4",
                "bought_asset_code": "USD",
                "bought_asset_issuer": "GISSUER",
                "created_at": "2015-10-01T12:00:00Z",
            }
        },
    )

    links: TradeLinks = Field(alias="_links")
    id: str
    paging_token: str
    offer_id: int
    seller: str
    sold_amount: str
    sold_asset_type: str
    sold_asset_code: Optional[str] = None
    sold_asset_issuer: Optional[str] = None
    buyer: str
    bought_amount: str
    bought_asset_type: str
    bought_asset_code: Optional[str] = None
    bought_asset_issuer: Optional[str] = None
    created_at: datetime

    def to_hal(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
