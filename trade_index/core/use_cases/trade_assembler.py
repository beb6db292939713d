from typing import Iterable, List, Optional

from pydantic import ValidationError

from trade_index.core.entities.effect import EffectRecord, EffectType
from trade_index.core.entities.ledger import LedgerMap, LedgerRecord
from trade_index.core.entities.trade import Link, TradeLinks, TradeResource
from trade_index.core.errors import ConsistencyError, LedgerNotFoundError


def _account_link(base_url: str, account_id: str) -> Link:
    return Link(href=f"{base_url.rstrip('/')}/accounts/{account_id}")


def populate(record: EffectRecord, ledger: Optional[LedgerRecord], base_url: str = "") -> TradeResource:
    """
    Builds the trade resource for one trade effect. `base_url` only feeds the
    account links; the data comes from `record` and `ledger` alone.
    """
    if record.type != EffectType.TRADE:
        raise ConsistencyError(f"effect {record.paging_token} is not a trade")
    if ledger is None:
        raise LedgerNotFoundError(record.ledger_sequence)
    if ledger.sequence != record.ledger_sequence:
        raise ConsistencyError(
            f"effect {record.paging_token} is in ledger {record.ledger_sequence}, got ledger {ledger.sequence}"
        )

    d = record.details
    try:
        return TradeResource(
            links=TradeLinks(
                seller=_account_link(base_url, d["seller"]),
                buyer=_account_link(base_url, record.account),
            ),
            id=record.paging_token,
            paging_token=record.paging_token,
            offer_id=d["offer_id"],
            seller=d["seller"],
            sold_amount=d["sold_amount"],
            sold_asset_type=d["sold_asset_type"],
            sold_asset_code=d.get("sold_asset_code"),
            sold_asset_issuer=d.get("sold_asset_issuer"),
            buyer=record.account,
            bought_amount=d["bought_amount"],
            bought_asset_type=d["bought_asset_type"],
            bought_asset_code=d.get("bought_asset_code"),
            bought_asset_issuer=d.get("bought_asset_issuer"),
            created_at=ledger.closed_at,
        )
    except KeyError as e:
        raise ConsistencyError(f"trade effect {record.paging_token} is missing detail {e}")
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise ConsistencyError(f"trade effect {record.paging_token} has malformed details: {fields}")


def assemble_trades(records: Iterable[EffectRecord], ledgers: LedgerMap, base_url: str = "") -> List[TradeResource]:
    return [populate(r, ledgers.get(r.ledger_sequence), base_url) for r in records]
