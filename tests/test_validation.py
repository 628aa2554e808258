"""Tests for the field-level validation rules"""

from datetime import datetime
from decimal import Decimal

import pytest

from trade_ledger.exceptions import TradeValidationError
from trade_ledger.models.trade import Operation
from trade_ledger.validation import (
    DATE_FORMATS,
    INVALID_DATE,
    INVALID_MARKET,
    INVALID_OPERATION,
    MISSING_FIELDS,
    NON_POSITIVE,
    normalize_operation,
    parse_positive_decimal,
    parse_trade_time,
    require_fields,
    resolve_date_format,
    split_market,
    strip_trailing_zeros,
)

# ============================================================================
# Dates
# ============================================================================


class TestDateFormats:
    def test_iso_like_format_has_priority(self):
        assert resolve_date_format("2024-01-15 10:30:45") is DATE_FORMATS[0]

    def test_day_first_format(self):
        assert resolve_date_format("15-01-2024 10:30") is DATE_FORMATS[1]

    def test_seconds_truncated(self):
        assert parse_trade_time("2024-01-15 10:30:45") == datetime(2024, 1, 15, 10, 30, 0)

    def test_day_first_parses(self):
        assert parse_trade_time("15-01-2024 10:30") == datetime(2024, 1, 15, 10, 30, 0)

    def test_surrounding_whitespace_ignored(self):
        assert parse_trade_time("  2024-01-15 10:30:45 ") == datetime(2024, 1, 15, 10, 30)

    @pytest.mark.parametrize(
        "text",
        [
            "not-a-date",
            "2024-1-15 10:30:45",  # single digit month
            "2024-01-15 10:30",  # first layout without seconds
            "15-01-2024 10:30:45",  # second layout with seconds
            "2024/01/15 10:30:45",
            "2024-01-15T10:30:45",
            "2024-13-01 10:00:00",
            "2024-02-30 10:00:00",
            "31-04-2024 10:00",
            "2024-01-15 24:00:00",
        ],
    )
    def test_rejects_non_conforming_text(self, text):
        assert resolve_date_format(text) is None
        with pytest.raises(TradeValidationError) as exc_info:
            parse_trade_time(text)
        assert exc_info.value.reason == INVALID_DATE


# ============================================================================
# Numbers
# ============================================================================


class TestPositiveDecimal:
    @pytest.mark.parametrize("text,expected", [("2", Decimal("2")), ("0.5", Decimal("0.5")), (" 1.25 ", Decimal("1.25"))])
    def test_accepts_positive(self, text, expected):
        assert parse_positive_decimal(text) == expected

    @pytest.mark.parametrize("text", ["0", "-1", "-0.0001", "abc", "1,5", "NaN", "Infinity", "-Infinity"])
    def test_rejects_non_positive_or_non_numeric(self, text):
        with pytest.raises(TradeValidationError) as exc_info:
            parse_positive_decimal(text)
        assert exc_info.value.reason == NON_POSITIVE

    @pytest.mark.parametrize(
        "text",
        [
            "0.00000000001",
            "0.000000000000000001",
            "1.123456789012345678",
            "99999999999999999999.999999999999999999",
            "1.50000000000000000000000",
        ],
    )
    def test_accepts_values_the_column_holds_exactly(self, text):
        assert parse_positive_decimal(text) == Decimal(text)

    @pytest.mark.parametrize(
        "text",
        ["1e400", "1E+20", "100000000000000000000", "0.0000000000000000001", "1.1234567890123456789"],
    )
    def test_rejects_values_outside_column_bounds(self, text):
        with pytest.raises(TradeValidationError) as exc_info:
            parse_positive_decimal(text)
        assert exc_info.value.reason == NON_POSITIVE

    @pytest.mark.parametrize(
        "value,expected",
        [("2.500", "2.5"), ("100", "100"), ("1.0", "1"), ("0.000", "0"), ("-3.10", "-3.1")],
    )
    def test_strip_trailing_zeros(self, value, expected):
        assert str(strip_trailing_zeros(Decimal(value))) == expected


# ============================================================================
# Operation, market, presence
# ============================================================================


class TestOperation:
    @pytest.mark.parametrize("text,expected", [("buy", Operation.BUY), ("SELL", Operation.SELL), ("Sell ", Operation.SELL)])
    def test_case_insensitive(self, text, expected):
        assert normalize_operation(text) is expected

    @pytest.mark.parametrize("text", ["hold", "B", "BUYSELL"])
    def test_rejects_unknown(self, text):
        with pytest.raises(TradeValidationError) as exc_info:
            normalize_operation(text)
        assert exc_info.value.reason == INVALID_OPERATION


class TestMarket:
    def test_splits_base_and_quote(self):
        assert split_market("BTC/USDT") == ("BTC", "USDT")

    def test_uppercases(self):
        assert split_market("eth/btc") == ("ETH", "BTC")

    @pytest.mark.parametrize("text", ["BTCUSDT", "BTC/", "/USDT", "/", "BTC/USDT/EUR", "BTC-X/USDT"])
    def test_rejects_bad_symbols(self, text):
        with pytest.raises(TradeValidationError) as exc_info:
            split_market(text)
        assert exc_info.value.reason == INVALID_MARKET


class TestPresence:
    def test_all_present(self):
        require_fields(["a", "b"])

    @pytest.mark.parametrize("values", [["a", None], ["", "b"], ["a", "   "]])
    def test_missing_or_blank(self, values):
        with pytest.raises(TradeValidationError) as exc_info:
            require_fields(values)
        assert exc_info.value.reason == MISSING_FIELDS
