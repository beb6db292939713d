from typing import Optional, Tuple

from trade_index.core.entities.asset import Asset
from trade_index.core.entities.effect import EffectFilter, EffectRecord, EffectType
from trade_index.core.entities.page import PageQuery
from trade_index.core.interfaces.datasource import IHistoryStore


class EffectsQuery:
    """
    Chainable query over the effects history. Every narrowing call returns a
    new query; nothing touches the store until `page()`.

        trades = EffectsQuery(store).of_type(EffectType.TRADE).for_account("GABC")
        records = await trades.page(page_query)
    """

    def __init__(self, store: IHistoryStore, criteria: Optional[EffectFilter] = None):
        self.store = store
        self.criteria = criteria or EffectFilter()

    def _narrow(self, **update) -> "EffectsQuery":
        return EffectsQuery(self.store, self.criteria.model_copy(update=update))

    def of_type(self, kind: EffectType) -> "EffectsQuery":
        return self._narrow(type=kind)

    def for_account(self, account_id: str) -> "EffectsQuery":
        return self._narrow(account=account_id)

    def for_order_book(self, selling: Asset, buying: Asset) -> "EffectsQuery":
        # selling matches the sold leg of a trade, buying the bought leg
        return self._narrow(sold_asset=selling, bought_asset=buying)

    async def page(self, page_query: PageQuery) -> Tuple[EffectRecord, ...]:
        records = await self.store.select_effects(self.criteria, page_query)
        return tuple(records)
