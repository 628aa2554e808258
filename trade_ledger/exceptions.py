"""Errors raised by the trade ledger"""


class TradeLedgerError(Exception):
    """Base exception for trade ledger errors"""
    pass


class TradeValidationError(TradeLedgerError):
    """A single row failed validation. Non-fatal to the ingestion pass."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TradeStorageError(TradeLedgerError):
    """Persisting a single trade failed"""
    pass


class TradeStreamError(TradeLedgerError):
    """The input stream could not be read. Aborts the whole pass."""
    pass


class InvalidUploadError(TradeLedgerError):
    """The uploaded file is not something we can ingest"""
    pass


class NoValidTradesError(TradeLedgerError):
    """The stream was read but no row passed validation"""

    def __init__(self, invalid_count: int):
        super().__init__("No valid trade data found in the file")
        self.invalid_count = invalid_count


class BalanceQueryError(TradeLedgerError):
    """Bad input to a balance query"""
    pass


class TimestampRequiredError(BalanceQueryError):
    def __init__(self):
        super().__init__("timestamp required")


class InvalidTimestampError(BalanceQueryError):
    def __init__(self, value=None):
        super().__init__("invalid timestamp")
        self.value = value
