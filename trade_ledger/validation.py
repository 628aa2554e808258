"""Validation and normalization rules for raw trade fields"""
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Tuple

from trade_ledger.exceptions import TradeValidationError
from trade_ledger.models.db import MAX_INTEGER_DIGITS, MAX_SCALE
from trade_ledger.models.trade import Operation

MISSING_FIELDS = "missing required fields"
NON_POSITIVE = "amount/price must be positive"
INVALID_DATE = "invalid date format"
INVALID_OPERATION = "invalid operation type"
INVALID_MARKET = "invalid market format"

MARKET_SEPARATOR = '/'
_COIN_PATTERN = re.compile(r'[A-Z0-9]+')

@dataclass(frozen=True)
class DateFormat:
    """
    One accepted timestamp layout.

    The regex pins exact digit widths and delimiters; strptime then rejects
    impossible calendar values such as month 13 or February 30.
    """
    name: str
    pattern: re.Pattern
    strptime_format: str

    def parse(self, text: str) -> Optional[datetime]:
        if not self.pattern.fullmatch(text):
            return None
        try:
            return datetime.strptime(text, self.strptime_format)
        except ValueError:
            return None

# Priority order: the first format that matches wins
DATE_FORMATS: Tuple[DateFormat, ...] = (
    DateFormat(
        name='YYYY-MM-DD HH:mm:ss',
        pattern=re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}'),
        strptime_format='%Y-%m-%d %H:%M:%S',
    ),
    DateFormat(
        name='DD-MM-YYYY HH:mm',
        pattern=re.compile(r'[0-9]{2}-[0-9]{2}-[0-9]{4} [0-9]{2}:[0-9]{2}'),
        strptime_format='%d-%m-%Y %H:%M',
    ),
)

def is_present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ''

def require_fields(values: Iterable[Optional[str]]) -> None:
    """Raise if any value is missing or blank"""
    if not all(is_present(v) for v in values):
        raise TradeValidationError(MISSING_FIELDS)

def strip_trailing_zeros(value: Decimal) -> Decimal:
    """Drop fractional trailing zeros without rounding ("2.500" -> "2.5")"""
    sign, digits, exponent = value.as_tuple()
    if not any(digits):
        return Decimal(0)
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits = digits[:-1]
        exponent += 1
    return Decimal((sign, digits, exponent))

def parse_positive_decimal(text: str) -> Decimal:
    """
    Parse a finite decimal strictly greater than zero.

    The value must also fit the stored trade columns exactly: at most
    MAX_INTEGER_DIGITS digits before the point and MAX_SCALE after it.
    """
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, ValueError):
        raise TradeValidationError(NON_POSITIVE)
    if not value.is_finite() or value <= 0:
        raise TradeValidationError(NON_POSITIVE)

    value = strip_trailing_zeros(value)
    if value.adjusted() >= MAX_INTEGER_DIGITS or value.as_tuple().exponent < -MAX_SCALE:
        raise TradeValidationError(NON_POSITIVE)
    return value

def resolve_date_format(text: str) -> Optional[DateFormat]:
    """Return the first accepted format that matches text exactly, if any"""
    text = text.strip()
    for date_format in DATE_FORMATS:
        if date_format.parse(text) is not None:
            return date_format
    return None

def parse_trade_time(text: str) -> datetime:
    """Parse a trade timestamp and truncate it to the minute"""
    date_format = resolve_date_format(text)
    if date_format is None:
        raise TradeValidationError(INVALID_DATE)
    parsed = date_format.parse(text.strip())
    return truncate_timestamp(parsed)

def truncate_timestamp(value: datetime) -> datetime:
    # Trades within the same minute collapse onto one natural key
    return value.replace(second=0, microsecond=0)

def normalize_operation(text: str) -> Operation:
    """Case-insensitive BUY/SELL check"""
    try:
        return Operation(text.strip().upper())
    except ValueError:
        raise TradeValidationError(INVALID_OPERATION)

def split_market(text: str) -> Tuple[str, str]:
    """
    Split a BASE/QUOTE market symbol into its two coins.

    Exactly one separator is allowed and both sides must be non-empty.
    Coins are returned uppercased.
    """
    parts = text.strip().split(MARKET_SEPARATOR)
    if len(parts) != 2:
        raise TradeValidationError(INVALID_MARKET)

    base_coin, quote_coin = (part.strip().upper() for part in parts)
    if not _COIN_PATTERN.fullmatch(base_coin) or not _COIN_PATTERN.fullmatch(quote_coin):
        raise TradeValidationError(INVALID_MARKET)
    return base_coin, quote_coin
