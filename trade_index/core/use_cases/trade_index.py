"""
Trade listing action.

Runs a fixed sequence of stages, each taking the previous stage's value and
returning the next one:

    params -> records -> ledgers -> page -> rendered body

A stage signals failure by raising a `TradeIndexError`. The action stops at
the first one and returns it on the `ActionResult` instead of a body.
"""
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from trade_index.core.entities.effect import EffectRecord, EffectType
from trade_index.core.entities.ledger import LedgerMap
from trade_index.core.entities.page import Page
from trade_index.core.entities.params import TradeIndexParams
from trade_index.core.errors import TradeIndexError
from trade_index.core.interfaces.datasource import IHistoryStore
from trade_index.core.use_cases.effects_query import EffectsQuery
from trade_index.core.use_cases.ledger_cache import LedgerCache
from trade_index.core.use_cases.page_builder import build_page
from trade_index.core.use_cases.trade_assembler import assemble_trades

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    STARTED = "started"
    PARAMS_LOADED = "params_loaded"
    RECORDS_LOADED = "records_loaded"
    LEDGERS_LOADED = "ledgers_loaded"
    PAGE_BUILT = "page_built"
    RENDERED = "rendered"


class RecordsLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    params: TradeIndexParams
    records: Tuple[EffectRecord, ...]


class LedgersLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    params: TradeIndexParams
    records: Tuple[EffectRecord, ...]
    ledgers: LedgerMap


class ActionResult(BaseModel):
    """Outcome of one run: `state` is the last stage that completed."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    state: PipelineState
    page: Optional[Page] = None
    body: Optional[dict] = None
    error: Optional[TradeIndexError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TradeIndexAction:
    def __init__(
        self,
        store: IHistoryStore,
        ledger_cache: Optional[LedgerCache] = None,
        base_url: str = "",
        base_path: str = "/trades",
        ensure_fresh: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self.store = store
        self.ledger_cache = ledger_cache or LedgerCache(store)
        self.base_url = base_url
        self.base_path = base_path
        self.ensure_fresh = ensure_fresh

    async def run(self, query: Mapping[str, str], account_id: Optional[str] = None) -> ActionResult:
        state = PipelineState.STARTED
        try:
            if self.ensure_fresh is not None:
                await self.ensure_fresh()

            params = self.load_params(query, account_id)
            state = PipelineState.PARAMS_LOADED

            loaded = await self.load_records(params)
            state = PipelineState.RECORDS_LOADED

            resolved = await self.load_ledgers(loaded)
            state = PipelineState.LEDGERS_LOADED

            page = self.load_page(resolved)
            state = PipelineState.PAGE_BUILT
        except TradeIndexError as e:
            level = logging.ERROR if e.http_status >= 500 else logging.INFO
            logger.log(level, f"Trade listing failed after {state.value}: {e}")
            return ActionResult(state=state, error=e)
        except asyncio.CancelledError:
            logger.info(f"Trade listing cancelled after {state.value}")
            raise

        return ActionResult(state=PipelineState.RENDERED, page=page, body=self.render(page))

    def load_params(self, query: Mapping[str, str], account_id: Optional[str] = None) -> TradeIndexParams:
        return TradeIndexParams.from_request(query, account_id=account_id)

    async def load_records(self, params: TradeIndexParams) -> RecordsLoaded:
        trades = EffectsQuery(self.store).of_type(EffectType.TRADE)

        if params.account_filter:
            trades = trades.for_account(params.account_filter)

        if params.has_order_book:
            trades = trades.for_order_book(params.selling, params.buying)

        records = await trades.page(params.page_query)
        return RecordsLoaded(params=params, records=records)

    async def load_ledgers(self, loaded: RecordsLoaded) -> LedgersLoaded:
        ledgers = await self.ledger_cache.load_ledgers(loaded.records)
        return LedgersLoaded(params=loaded.params, records=loaded.records, ledgers=ledgers)

    def load_page(self, resolved: LedgersLoaded) -> Page:
        resources = assemble_trades(resolved.records, resolved.ledgers, self.base_url)
        return build_page(resources, resolved.params.page_query, self.base_url, self.base_path)

    def render(self, page: Page) -> dict:
        return page.to_hal()
