"""
Tests for batched ledger resolution.
"""
import pytest

from trade_index.core.errors import LedgerNotFoundError
from trade_index.core.use_cases.ledger_cache import LedgerCache
from trade_index.infrastructure.persistence.memory_repo import MemoryRepo

from conftest import make_ledger, make_trade


class FakeCache:
    """Dict-backed stand-in for RedisService."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.writes = []

    def get_many(self, keys):
        return {k: self.data[k] for k in keys if k in self.data}

    def set_many(self, values, ttl_seconds=60):
        self.writes.append((dict(values), ttl_seconds))
        self.data.update(values)


async def test_one_batch_for_distinct_sequences():
    store = MemoryRepo(ledgers=[make_ledger(s) for s in (10, 12)])
    records = [make_trade(10, tx=i) for i in range(1, 6)] + [make_trade(12)]

    ledgers = await LedgerCache(store).load_ledgers(records)

    assert store.ledger_batches == [(10, 12)]
    assert set(ledgers) == {10, 12}
    assert ledgers[10].sequence == 10


async def test_no_records_no_fetch():
    store = MemoryRepo()
    assert await LedgerCache(store).load_ledgers([]) == {}
    assert store.ledger_batches == []


async def test_missing_ledger_fails_whole_batch():
    store = MemoryRepo(ledgers=[make_ledger(10)])
    records = [make_trade(10), make_trade(99)]

    with pytest.raises(LedgerNotFoundError) as exc:
        await LedgerCache(store).load_ledgers(records)

    assert exc.value.sequence == 99
    assert "99" in str(exc.value)


async def test_cache_hits_skip_the_store():
    store = MemoryRepo(ledgers=[make_ledger(s) for s in (10, 12)])
    cache = FakeCache({"ledger:10": make_ledger(10).model_dump(mode="json")})

    ledgers = await LedgerCache(store, cache=cache, ttl_seconds=30).load_ledgers([make_trade(10), make_trade(12)])

    assert store.ledger_batches == [(12,)]
    assert set(ledgers) == {10, 12}
    assert ledgers[10] == make_ledger(10)
    assert list(cache.writes[0][0]) == ["ledger:12"]
    assert cache.writes[0][1] == 30


async def test_fully_cached_batch_does_not_touch_store():
    store = MemoryRepo()
    cache = FakeCache({"ledger:10": make_ledger(10).model_dump(mode="json")})

    ledgers = await LedgerCache(store, cache=cache).load_ledgers([make_trade(10), make_trade(10, tx=2)])

    assert store.ledger_batches == []
    assert list(ledgers) == [10]
    assert cache.writes == []


async def test_unreadable_cache_entry_falls_back_to_store():
    store = MemoryRepo(ledgers=[make_ledger(10)])
    cache = FakeCache({"ledger:10": {"sequence": 10}})

    ledgers = await LedgerCache(store, cache=cache).load_ledgers([make_trade(10)])

    assert store.ledger_batches == [(10,)]
    assert ledgers == {10: make_ledger(10)}
    assert cache.data["ledger:10"] == make_ledger(10).model_dump(mode="json")


async def test_cache_entry_for_another_ledger_is_ignored():
    store = MemoryRepo(ledgers=[make_ledger(10)])
    cache = FakeCache({"ledger:10": make_ledger(11).model_dump(mode="json")})

    ledgers = await LedgerCache(store, cache=cache).load_ledgers([make_trade(10)])

    assert set(ledgers) == {10}
    assert ledgers[10] == make_ledger(10)
    assert store.ledger_batches == [(10,)]


async def test_zero_ttl_skips_cache_writes():
    store = MemoryRepo(ledgers=[make_ledger(10)])
    cache = FakeCache()

    await LedgerCache(store, cache=cache, ttl_seconds=0).load_ledgers([make_trade(10)])

    assert cache.writes == []
