"""Database storage service for trade records"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from trade_ledger.exceptions import TradeStorageError
from trade_ledger.models.db import Trade
from trade_ledger.models.trade import Operation, TradeRecord

logger = logging.getLogger(__name__)

class TradeStore(ABC):
    """What the ingestion pipeline and balance queries need from storage"""

    @abstractmethod
    def upsert(self, record: TradeRecord) -> None:
        """Insert the record, or fully replace the one stored under the same (utc_time, market)"""

    @abstractmethod
    def query_before(self, cutoff: datetime) -> List[TradeRecord]:
        """All records with utc_time strictly earlier than cutoff, in no particular order"""

class StorageService(TradeStore):
    """Handles all database operations for trades"""

    def __init__(self, session: Session):
        if not session:
            raise ValueError("Database session is required")
        self.session = session

    def upsert(self, record: TradeRecord) -> None:
        """Store a trade, overwriting every field of an existing trade with the same natural key"""
        try:
            trade = self.session.query(Trade).filter_by(
                utc_time=record.utc_time,
                market=record.market
            ).first()

            if trade:
                trade.operation = record.operation.value
                trade.amount = record.amount
                trade.price = record.price
                trade.base_coin = record.base_coin
                trade.quote_coin = record.quote_coin
                trade.updated_at = datetime.utcnow()
            else:
                trade = Trade(
                    utc_time=record.utc_time,
                    operation=record.operation.value,
                    market=record.market,
                    amount=record.amount,
                    price=record.price,
                    base_coin=record.base_coin,
                    quote_coin=record.quote_coin
                )
                self.session.add(trade)

            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error upserting trade {record.market} @ {record.utc_time}: {e}")
            raise TradeStorageError(f"Failed to store trade: {str(e)}") from e

    def query_before(self, cutoff: datetime) -> List[TradeRecord]:
        """Load every trade executed strictly before cutoff"""
        try:
            trades = self.session.query(Trade).filter(Trade.utc_time < cutoff).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error querying trades before {cutoff}: {e}")
            raise TradeStorageError(f"Failed to query trades: {str(e)}") from e

        return [self._to_record(trade) for trade in trades]

    @staticmethod
    def _to_record(trade: Trade) -> TradeRecord:
        return TradeRecord(
            utc_time=trade.utc_time,
            operation=Operation(trade.operation),
            market=trade.market,
            amount=trade.amount,
            price=trade.price,
            base_coin=trade.base_coin,
            quote_coin=trade.quote_coin
        )
