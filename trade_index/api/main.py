import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from trade_index import config
from trade_index.core.errors import DataAccessError
from trade_index.core.interfaces.datasource import IHistoryStore
from trade_index.core.use_cases.ledger_cache import LedgerCache
from trade_index.core.use_cases.trade_index import TradeIndexAction
from trade_index.infrastructure.cache.redis_service import RedisService
from trade_index.infrastructure.persistence.memory_repo import MemoryRepo
from trade_index.infrastructure.persistence.postgres_repo import PostgresRepo

# Setup Logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Trade Index API", version="1.0.0", description="Paginated trade history with ledger close times")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# --- Dependency Injection ---

@lru_cache(maxsize=1)
def get_store() -> IHistoryStore:
    if not config.DATABASE_URL:
        logger.info("DATABASE_URL not set. Serving from an empty in-memory store.")
        return MemoryRepo()
    try:
        return PostgresRepo(config.DATABASE_URL)
    except DataAccessError as e:
        logger.error(f"Failed to connect to DB: {e}")
        raise HTTPException(status_code=503, detail="History database unavailable")


@lru_cache(maxsize=1)
def get_redis() -> RedisService:
    return RedisService()


def get_ledger_cache(store: IHistoryStore = Depends(get_store)) -> LedgerCache:
    return LedgerCache(store, cache=get_redis())


async def _list_trades(
    request: Request,
    store: IHistoryStore,
    ledger_cache: LedgerCache,
    account_id: Optional[str] = None,
) -> dict:
    action = TradeIndexAction(
        store,
        ledger_cache,
        base_url=config.BASE_URL or str(request.base_url),
        base_path=request.url.path,
    )
    result = await action.run(dict(request.query_params), account_id=account_id)
    if not result.ok:
        raise HTTPException(status_code=result.error.http_status, detail=str(result.error))
    return result.body

# --- Endpoints ---

@app.get("/health")
async def health(store: IHistoryStore = Depends(get_store)):
    try:
        latest = await store.latest_ledger()
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "healthy", "latest_ledger": latest}


@app.get("/trades")
async def list_trades(
    request: Request,
    store: IHistoryStore = Depends(get_store),
    ledger_cache: LedgerCache = Depends(get_ledger_cache),
):
    """
    Lists trades, optionally narrowed by `account_id` and/or an order book
    (`selling_asset_type/code/issuer` with `buying_asset_type/code/issuer`),
    paged with `cursor`, `limit` and `order`. The query string is parsed by
    the action itself so that malformed values come back as 400s with the
    action's own messages.
    """
    return await _list_trades(request, store, ledger_cache)


@app.get("/accounts/{account_id}/trades")
async def list_account_trades(
    account_id: str,
    request: Request,
    store: IHistoryStore = Depends(get_store),
    ledger_cache: LedgerCache = Depends(get_ledger_cache),
):
    return await _list_trades(request, store, ledger_cache, account_id=account_id)


@app.get("/order_book/trades")
async def list_order_book_trades(
    request: Request,
    store: IHistoryStore = Depends(get_store),
    ledger_cache: LedgerCache = Depends(get_ledger_cache),
):
    """Same listing as `/trades`, for clients that address an order book directly."""
    return await _list_trades(request, store, ledger_cache)
