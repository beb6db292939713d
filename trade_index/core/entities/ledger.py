from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


class LedgerRecord(BaseModel):
    """
    Metadata of a closed ledger. Written once by ingestion and never updated,
    which is what makes it safe to cache.
    """
    model_config = ConfigDict(frozen=True)

    sequence: int
    ledger_hash: str
    previous_ledger_hash: Optional[str] = None
    transaction_count: int = 0
    operation_count: int = 0
    closed_at: datetime


# sequence -> ledger, built per request
LedgerMap = Dict[int, LedgerRecord]
