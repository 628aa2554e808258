"""Domain models for trade rows and validated trade records"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple

# Column headers of the uploaded CSV export
TIME_COLUMN = 'UTC_Time'
OPERATION_COLUMN = 'Operation'
MARKET_COLUMN = 'Market'
AMOUNT_COLUMN = 'Buy/Sell Amount'
PRICE_COLUMN = 'Price'

REQUIRED_COLUMNS = (TIME_COLUMN, OPERATION_COLUMN, MARKET_COLUMN, AMOUNT_COLUMN, PRICE_COLUMN)

RawRow = Dict[str, Optional[str]]

class Operation(str, Enum):
    """Side of a trade"""
    BUY = 'BUY'
    SELL = 'SELL'

@dataclass
class TradeRecord:
    """Validated trade, ready to be stored"""
    utc_time: datetime      # naive UTC, truncated to the minute
    operation: Operation
    market: str             # BASE/QUOTE
    amount: Decimal         # quantity of base coin
    price: Decimal          # quote coin per unit of base coin
    base_coin: str
    quote_coin: str

    @property
    def natural_key(self) -> Tuple[datetime, str]:
        return self.utc_time, self.market

@dataclass
class RejectedRow:
    """Row that failed validation. Logged, never stored."""
    row_number: int
    reason: str
    row: RawRow = field(default_factory=dict)
