import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from trade_index import config
from trade_index.core.entities.effect import EffectRecord
from trade_index.core.entities.ledger import LedgerMap, LedgerRecord
from trade_index.core.errors import LedgerNotFoundError
from trade_index.core.interfaces.datasource import IHistoryStore
from trade_index.infrastructure.cache.redis_service import RedisService

logger = logging.getLogger(__name__)


def _cache_key(sequence: int) -> str:
    return f"ledger:{sequence}"


def _from_cache(sequence: int, data: Any) -> Optional[LedgerRecord]:
    """Unreadable or mismatched entries count as misses."""
    if data is None:
        return None
    try:
        ledger = LedgerRecord.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Discarding cached ledger {sequence}: {e}")
        return None
    if ledger.sequence != sequence:
        logger.warning(f"Discarding cached ledger {sequence}: entry holds ledger {ledger.sequence}")
        return None
    return ledger


class LedgerCache:
    """
    Resolves the ledgers referenced by a batch of records.

    Sequences are deduplicated and loaded with a single store call, so a page
    of N trades spread over K ledgers costs one query for K rows. When a Redis
    cache is configured it is consulted first and only the misses hit the
    store. The result is all-or-nothing: a sequence that no store knows about
    raises `LedgerNotFoundError`.
    """

    def __init__(self, store: IHistoryStore, cache: Optional[RedisService] = None, ttl_seconds: Optional[int] = None):
        self.store = store
        self.cache = cache
        self.ttl_seconds = config.LEDGER_CACHE_TTL if ttl_seconds is None else ttl_seconds

    async def load_ledgers(self, records: Iterable[EffectRecord]) -> LedgerMap:
        sequences = sorted({r.ledger_sequence for r in records})
        if not sequences:
            return {}

        ledgers: LedgerMap = {}
        if self.cache is not None:
            cached = self.cache.get_many(_cache_key(seq) for seq in sequences)
            for seq in sequences:
                ledger = _from_cache(seq, cached.get(_cache_key(seq)))
                if ledger is not None:
                    ledgers[seq] = ledger

        missing = [seq for seq in sequences if seq not in ledgers]
        if missing:
            loaded = await self.store.get_ledgers_by_sequence(missing)
            fresh = {ledger.sequence: ledger for ledger in loaded if ledger.sequence in missing}
            ledgers.update(fresh)

            if self.cache is not None and fresh and self.ttl_seconds > 0:
                self.cache.set_many(
                    {_cache_key(seq): ledger.model_dump(mode="json") for seq, ledger in fresh.items()},
                    ttl_seconds=self.ttl_seconds,
                )

        for seq in sequences:
            if seq not in ledgers:
                logger.error(f"Ledger {seq} referenced by history but missing from the ledger store")
                raise LedgerNotFoundError(seq)

        logger.debug(f"Resolved {len(sequences)} ledgers ({len(missing)} from store)")
        return ledgers
