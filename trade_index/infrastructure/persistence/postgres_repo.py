import asyncio
import logging
from typing import Iterable, List, Optional, Tuple

import psycopg2

from trade_index.core.entities.asset import Asset
from trade_index.core.entities.effect import EffectFilter, EffectRecord, EffectType
from trade_index.core.entities.ledger import LedgerRecord
from trade_index.core.entities.page import PageQuery
from trade_index.core.errors import DataAccessError
from trade_index.core.interfaces.datasource import IHistoryStore

logger = logging.getLogger(__name__)

EFFECT_COLUMNS = 'heff.account, heff.history_operation_id, heff."order", heff.type, heff.details'
LEDGER_COLUMNS = "sequence, ledger_hash, previous_ledger_hash, transaction_count, operation_count, closed_at"


def _asset_clauses(prefix: str, asset: Asset) -> Tuple[List[str], list]:
    clauses = [f"heff.details->>'{prefix}asset_type' = %s"]
    params: list = [asset.asset_type]
    if asset.asset_type == "native":
        clauses.append(f"heff.details->>'{prefix}asset_code' IS NULL")
        clauses.append(f"heff.details->>'{prefix}asset_issuer' IS NULL")
    else:
        clauses.append(f"heff.details->>'{prefix}asset_code' = %s")
        clauses.append(f"heff.details->>'{prefix}asset_issuer' = %s")
        params += [asset.code, asset.issuer]
    return clauses, params


def build_effects_query(criteria: EffectFilter, page_query: PageQuery) -> Tuple[str, list]:
    """
    Renders the filter and page clause as one parameterized SELECT. Paging is
    keyset based on (history_operation_id, "order") with an exclusive cursor.
    """
    clauses: List[str] = []
    params: list = []

    if criteria.type is not None:
        clauses.append("heff.type = %s")
        params.append(int(criteria.type))
    if criteria.account is not None:
        clauses.append("heff.account = %s")
        params.append(criteria.account)
    if criteria.sold_asset is not None:
        c, p = _asset_clauses("sold_", criteria.sold_asset)
        clauses += c
        params += p
    if criteria.bought_asset is not None:
        c, p = _asset_clauses("bought_", criteria.bought_asset)
        clauses += c
        params += p

    op_id, order = page_query.cursor_position()
    if page_query.order == "asc":
        clauses.append('(heff.history_operation_id, heff."order") > (%s, %s)')
        direction = "ASC"
    else:
        clauses.append('(heff.history_operation_id, heff."order") < (%s, %s)')
        direction = "DESC"
    params += [op_id, order]

    query = f"SELECT {EFFECT_COLUMNS} FROM history_effects heff WHERE " + " AND ".join(clauses)
    query += f' ORDER BY heff.history_operation_id {direction}, heff."order" {direction} LIMIT %s'
    params.append(page_query.limit)
    return query, params


class PostgresRepo(IHistoryStore):
    def __init__(self, dsn: str):
        self.dsn = dsn
        self._init_db()

    def _init_db(self):
        self._execute("""
            CREATE TABLE IF NOT EXISTS history_ledgers (
                sequence INTEGER PRIMARY KEY,
                ledger_hash VARCHAR(64) NOT NULL,
                previous_ledger_hash VARCHAR(64),
                transaction_count INTEGER NOT NULL DEFAULT 0,
                operation_count INTEGER NOT NULL DEFAULT 0,
                closed_at TIMESTAMPTZ NOT NULL
            );
        """)
        self._execute("""
            CREATE TABLE IF NOT EXISTS history_effects (
                account VARCHAR(64) NOT NULL,
                history_operation_id BIGINT NOT NULL,
                "order" INTEGER NOT NULL,
                type INTEGER NOT NULL,
                details JSONB,
                PRIMARY KEY (history_operation_id, "order")
            );
        """)
        self._execute("CREATE INDEX IF NOT EXISTS index_history_effects_on_type ON history_effects (type);")
        self._execute("CREATE INDEX IF NOT EXISTS index_history_effects_on_account ON history_effects (account);")

    def _connect(self):
        try:
            return psycopg2.connect(self.dsn)
        except psycopg2.Error as e:
            raise DataAccessError(f"could not connect to history database: {e}")

    def _execute(self, query: str, params=None):
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(query, params)
            conn.commit()
            cur.close()
        except psycopg2.Error as e:
            conn.rollback()
            raise DataAccessError(f"history query failed: {e}")
        finally:
            conn.close()

    def _fetch(self, conn, query: str, params=None) -> list:
        try:
            cur = conn.cursor()
            cur.execute(query, params)
            rows = cur.fetchall()
            cur.close()
            return rows
        except psycopg2.Error as e:
            raise DataAccessError(f"history query failed: {e}")
        finally:
            conn.close()

    async def _query(self, query: str, params=None) -> list:
        """
        Runs a SELECT on a worker thread. If the awaiting task is cancelled the
        running statement is cancelled server side; the worker thread still
        owns the connection and closes it once `execute` returns.
        """
        conn = await asyncio.to_thread(self._connect)
        try:
            return await asyncio.to_thread(self._fetch, conn, query, params)
        except asyncio.CancelledError:
            try:
                conn.cancel()
            except psycopg2.Error as e:
                logger.warning(f"Could not cancel history query: {e}")
            raise

    # IHistoryStore Implementation
    async def select_effects(self, criteria: EffectFilter, page_query: PageQuery) -> List[EffectRecord]:
        query, params = build_effects_query(criteria, page_query)
        rows = await self._query(query, params)

        return [
            EffectRecord(
                account=row[0],
                history_operation_id=row[1],
                order=row[2],
                type=EffectType(row[3]),
                details=row[4] or {},
            )
            for row in rows
        ]

    async def get_ledgers_by_sequence(self, sequences: Iterable[int]) -> List[LedgerRecord]:
        sequences = list(sequences)
        if not sequences:
            return []

        query = f"SELECT {LEDGER_COLUMNS} FROM history_ledgers WHERE sequence = ANY(%s)"
        rows = await self._query(query, (sequences,))

        return [
            LedgerRecord(
                sequence=row[0],
                ledger_hash=row[1],
                previous_ledger_hash=row[2],
                transaction_count=row[3],
                operation_count=row[4],
                closed_at=row[5],
            )
            for row in rows
        ]

    async def latest_ledger(self) -> Optional[int]:
        rows = await self._query("SELECT MAX(sequence) FROM history_ledgers")
        return rows[0][0] if rows else None
