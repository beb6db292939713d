from typing import Dict, Iterable, List, Optional, Tuple

from trade_index.core.entities.effect import EffectFilter, EffectRecord
from trade_index.core.entities.ledger import LedgerRecord
from trade_index.core.entities.page import PageQuery
from trade_index.core.interfaces.datasource import IHistoryStore


class MemoryRepo(IHistoryStore):
    """
    In-process history store for local runs without Postgres and for tests.
    Records every ledger batch it serves in `ledger_batches`.
    """

    def __init__(self, effects: Iterable[EffectRecord] = (), ledgers: Iterable[LedgerRecord] = ()):
        self.effects: List[EffectRecord] = sorted(effects, key=lambda e: e.paging_key)
        self.ledgers: Dict[int, LedgerRecord] = {ledger.sequence: ledger for ledger in ledgers}
        self.ledger_batches: List[Tuple[int, ...]] = []

    def add_effects(self, effects: Iterable[EffectRecord]):
        self.effects = sorted([*self.effects, *effects], key=lambda e: e.paging_key)

    async def select_effects(self, criteria: EffectFilter, page_query: PageQuery) -> List[EffectRecord]:
        position = page_query.cursor_position()
        if page_query.order == "asc":
            candidates = (e for e in self.effects if e.paging_key > position)
        else:
            candidates = (e for e in reversed(self.effects) if e.paging_key < position)

        out = []
        for effect in candidates:
            if not criteria.matches(effect):
                continue
            out.append(effect)
            if len(out) == page_query.limit:
                break
        return out

    async def get_ledgers_by_sequence(self, sequences: Iterable[int]) -> List[LedgerRecord]:
        batch = tuple(sequences)
        self.ledger_batches.append(batch)
        return [self.ledgers[seq] for seq in batch if seq in self.ledgers]

    async def latest_ledger(self) -> Optional[int]:
        return max(self.ledgers) if self.ledgers else None
