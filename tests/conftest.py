"""
Pytest configuration and shared fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient, ASGITransport

from trade_index.api.main import app, get_ledger_cache, get_store
from trade_index.core.entities.asset import Asset
from trade_index.core.entities.effect import EffectRecord, EffectType, toid
from trade_index.core.entities.ledger import LedgerRecord
from trade_index.core.use_cases.ledger_cache import LedgerCache
from trade_index.infrastructure.persistence.memory_repo import MemoryRepo

ISSUER = "GISSUER"
XLM = Asset.native()
USD = Asset.credit("USD", ISSUER)
EUR = Asset.credit("EUR", ISSUER)

GENESIS = datetime(2015, 10, 1, 12, 0, tzinfo=timezone.utc)


def make_ledger(sequence: int) -> LedgerRecord:
    return LedgerRecord(
        sequence=sequence,
        ledger_hash=f"{sequence:064x}",
        previous_ledger_hash=f"{sequence - 1:064x}",
        transaction_count=2,
        operation_count=3,
        closed_at=GENESIS + timedelta(seconds=5 * sequence),
    )


def make_trade(
    ledger: int,
    tx: int = 1,
    buyer: str = "GBUYER",
    seller: str = "GSELLER",
    sold: Asset = XLM,
    bought: Asset = USD,
    offer_id: int = 1,
) -> EffectRecord:
    details = {
        "offer_id": offer_id,
        "seller": seller,
        "sold_amount": "10.0000000",
        "bought_amount": "2.5000000",
        **sold.as_details("sold_"),
        **bought.as_details("bought_"),
    }
    return EffectRecord(
        account=buyer,
        history_operation_id=toid(ledger, tx, 1),
        order=1,
        type=EffectType.TRADE,
        details=details,
    )


@pytest.fixture
def trades():
    """Three trades at ledgers 10, 10 and 12."""
    return [
        make_trade(10, tx=1, buyer="GBUYER1", sold=XLM, bought=USD, offer_id=1),
        make_trade(10, tx=2, buyer="GBUYER2", sold=USD, bought=EUR, offer_id=2),
        make_trade(12, tx=1, buyer="GBUYER1", sold=USD, bought=EUR, offer_id=3),
    ]


@pytest.fixture
def store(trades):
    credit = EffectRecord(
        account="GBUYER1",
        history_operation_id=toid(11, 1, 1),
        type=EffectType.ACCOUNT_CREDITED,
        details={"amount": "5.0000000", "asset_type": "native"},
    )
    return MemoryRepo(effects=[*trades, credit], ledgers=[make_ledger(s) for s in (10, 11, 12)])


@pytest.fixture
async def client(store):
    """Async HTTP client for testing FastAPI endpoints against the seeded store."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_ledger_cache] = lambda: LedgerCache(store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
