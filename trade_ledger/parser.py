"""Turns raw CSV rows into validated trade records"""
from typing import Mapping, Optional, Union

from trade_ledger.exceptions import TradeValidationError
from trade_ledger.models.trade import (
    AMOUNT_COLUMN,
    MARKET_COLUMN,
    OPERATION_COLUMN,
    PRICE_COLUMN,
    REQUIRED_COLUMNS,
    TIME_COLUMN,
    RejectedRow,
    TradeRecord,
)
from trade_ledger.validation import (
    MARKET_SEPARATOR,
    normalize_operation,
    parse_positive_decimal,
    parse_trade_time,
    require_fields,
    split_market,
)

ParseResult = Union[TradeRecord, RejectedRow]

def build_record(row: Mapping[str, Optional[str]]) -> TradeRecord:
    """
    Validate one raw row and build a TradeRecord from it.

    Checks run in a fixed order and the first failure wins:
    presence, amount/price sign, date format, operation, market.

    Raises:
        TradeValidationError: With the reason of the first failed check
    """
    require_fields(row.get(column) for column in REQUIRED_COLUMNS)

    amount = parse_positive_decimal(row[AMOUNT_COLUMN])
    price = parse_positive_decimal(row[PRICE_COLUMN])
    utc_time = parse_trade_time(row[TIME_COLUMN])
    operation = normalize_operation(row[OPERATION_COLUMN])
    base_coin, quote_coin = split_market(row[MARKET_COLUMN])

    return TradeRecord(
        utc_time=utc_time,
        operation=operation,
        market=f"{base_coin}{MARKET_SEPARATOR}{quote_coin}",
        amount=amount,
        price=price,
        base_coin=base_coin,
        quote_coin=quote_coin
    )

def parse_row(row: Mapping[str, Optional[str]], row_number: int = 0) -> ParseResult:
    """Parse one row, returning a RejectedRow instead of raising on bad input"""
    try:
        return build_record(row)
    except TradeValidationError as e:
        return RejectedRow(row_number=row_number, reason=e.reason, row=dict(row))
