"""Point-in-time balances built from stored trades"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, localcontext
from typing import Dict, Iterable, Union

from trade_ledger.exceptions import InvalidTimestampError, TimestampRequiredError
from trade_ledger.models.results import BalanceResponse
from trade_ledger.models.trade import Operation, TradeRecord
from trade_ledger.services.storage import TradeStore
from trade_ledger.validation import strip_trailing_zeros

logger = logging.getLogger(__name__)

NO_TRADES_MESSAGE = "No trades found before the given timestamp"

SUM_PRECISION = 80

CutoffInput = Union[str, int, float, datetime, None]

def compute_balances(records: Iterable[TradeRecord]) -> Dict[str, Decimal]:
    """
    Net position per base coin: BUY adds the amount, SELL subtracts it.

    Price and quote coin are ignored; balances are in base-coin units.
    Traversal order does not matter.
    """
    balances: Dict[str, Decimal] = {}
    # Wide enough that sums of stored quantities never round
    with localcontext() as ctx:
        ctx.prec = SUM_PRECISION
        for record in records:
            balances.setdefault(record.base_coin, Decimal(0))
            if record.operation == Operation.BUY:
                balances[record.base_coin] += record.amount
            elif record.operation == Operation.SELL:
                balances[record.base_coin] -= record.amount
    return {coin: strip_trailing_zeros(total) for coin, total in balances.items()}

def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def parse_cutoff(value: CutoffInput) -> datetime:
    """
    Parse a query cutoff into a naive UTC datetime.

    Accepts ISO-8601 text (a trailing "Z" is allowed), epoch milliseconds
    as a number, or a datetime. Aware values are converted to UTC.

    Raises:
        TimestampRequiredError: If value is missing or blank
        InvalidTimestampError: If value cannot be parsed
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise TimestampRequiredError()

    if isinstance(value, datetime):
        return _to_naive_utc(value)

    # bool is an int subclass; true/false is not a timestamp
    if isinstance(value, bool):
        raise InvalidTimestampError(value)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            raise InvalidTimestampError(value)

    if not isinstance(value, str):
        raise InvalidTimestampError(value)

    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return _to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        raise InvalidTimestampError(value)

class BalanceService:
    """Answers "what did we hold just before this instant" queries"""

    def __init__(self, store: TradeStore):
        self.store = store

    def get_balances(self, timestamp: CutoffInput) -> BalanceResponse:
        """
        Balances from every trade strictly before timestamp.

        A trade stamped exactly at the cutoff is excluded. An empty result is
        not an error: balances is {} and message says no trades were found.

        Raises:
            TimestampRequiredError, InvalidTimestampError: Before storage is touched
            TradeStorageError: If the trades cannot be loaded
        """
        cutoff = parse_cutoff(timestamp)
        records = self.store.query_before(cutoff)

        if not records:
            logger.info(f"No trades found before {cutoff.isoformat()}")
            return BalanceResponse(cutoff=cutoff, balances={}, message=NO_TRADES_MESSAGE)

        balances = compute_balances(records)
        logger.info(f"Computed balances for {len(balances)} coins from {len(records)} trades before {cutoff.isoformat()}")
        return BalanceResponse(cutoff=cutoff, balances=balances)
