"""
Error types raised by the trade index pipeline.

Every stage failure is one of these; the action records it and the API layer
maps `http_status` onto the response.
"""


class TradeIndexError(Exception):
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParamError(TradeIndexError):
    """A request parameter could not be parsed."""
    http_status = 400

    def __init__(self, name: str, reason: str):
        super().__init__(f"invalid parameter '{name}': {reason}")
        self.name = name


class DataAccessError(TradeIndexError):
    """The backing store was unreachable or the query failed."""
    http_status = 503


class StaleHistoryError(TradeIndexError):
    http_status = 503


class ConsistencyError(TradeIndexError):
    """Stored data contradicts itself (e.g. a dangling ledger reference)."""
    http_status = 500


class LedgerNotFoundError(ConsistencyError):
    def __init__(self, sequence: int):
        super().__init__(f"could not find ledger data for sequence {sequence}")
        self.sequence = sequence
