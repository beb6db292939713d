from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from trade_index.core.entities.effect import EffectFilter, EffectRecord
from trade_index.core.entities.ledger import LedgerRecord
from trade_index.core.entities.page import PageQuery


class IHistoryStore(ABC):
    @abstractmethod
    async def select_effects(self, criteria: EffectFilter, page_query: PageQuery) -> List[EffectRecord]:
        """
        Returns at most `page_query.limit` effects matching `criteria`, strictly
        after (asc) or before (desc) the cursor, ordered by paging key.
        """
        pass

    @abstractmethod
    async def get_ledgers_by_sequence(self, sequences: Iterable[int]) -> List[LedgerRecord]:
        """
        Loads every ledger in `sequences` in a single round trip. Sequences
        with no stored ledger are simply absent from the result.
        """
        pass

    @abstractmethod
    async def latest_ledger(self) -> Optional[int]:
        pass
