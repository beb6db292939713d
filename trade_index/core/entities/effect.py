from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from trade_index.core.entities.asset import Asset


class EffectType(IntEnum):
    ACCOUNT_CREATED = 0
    ACCOUNT_REMOVED = 1
    ACCOUNT_CREDITED = 2
    ACCOUNT_DEBITED = 3
    SIGNER_CREATED = 10
    TRUSTLINE_CREATED = 20
    OFFER_CREATED = 30
    OFFER_REMOVED = 31
    OFFER_UPDATED = 32
    TRADE = 33


def toid(ledger_sequence: int, transaction_order: int = 0, operation_index: int = 0) -> int:
    """
    Builds a total-order id: ledger sequence in the high 32 bits, then 20 bits
    of transaction order and 12 bits of operation index.
    """
    return (ledger_sequence << 32) | (transaction_order << 12) | operation_index


class EffectRecord(BaseModel):
    """
    One row of the effects history. For trades `account` is the buyer and
    `details` holds the offer, seller and both asset legs.
    """
    model_config = ConfigDict(frozen=True)

    account: str
    history_operation_id: int
    order: int = 1
    type: EffectType
    details: Dict[str, Any] = Field(default_factory=dict)

    @property
    def paging_token(self) -> str:
        return f"{self.history_operation_id}-{self.order}"

    @property
    def ledger_sequence(self) -> int:
        return self.history_operation_id >> 32

    @property
    def paging_key(self) -> tuple:
        return (self.history_operation_id, self.order)


class EffectFilter(BaseModel):
    """
    Conjunction of the constraints a query has accumulated. A None field
    places no constraint on that dimension.
    """
    model_config = ConfigDict(frozen=True)

    type: Optional[EffectType] = None
    account: Optional[str] = None
    sold_asset: Optional[Asset] = None
    bought_asset: Optional[Asset] = None

    def matches(self, record: EffectRecord) -> bool:
        if self.type is not None and record.type != self.type:
            return False
        if self.account is not None and record.account != self.account:
            return False
        if self.sold_asset is not None and not _leg_matches(record.details, "sold_", self.sold_asset):
            return False
        if self.bought_asset is not None and not _leg_matches(record.details, "bought_", self.bought_asset):
            return False
        return True


def _leg_matches(details: Dict[str, Any], prefix: str, asset: Asset) -> bool:
    return (
        details.get(f"{prefix}asset_type") == asset.asset_type
        and details.get(f"{prefix}asset_code") == asset.code
        and details.get(f"{prefix}asset_issuer") == asset.issuer
    )
