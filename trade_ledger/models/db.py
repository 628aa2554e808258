"""SQLAlchemy database models for storing trade records"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()

# Largest quantity a trade may carry: 20 integer digits, 18 decimal places
MAX_INTEGER_DIGITS = 20
MAX_SCALE = 18

class ExactDecimal(TypeDecorator):
    """
    Decimal stored as its plain-notation text.

    Keeps every digit on every backend; SQLite would otherwise round-trip
    Numeric through a float.
    """
    impl = String(MAX_INTEGER_DIGITS + MAX_SCALE + 2)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return format(Decimal(value), 'f')

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)

class Trade(Base):
    """
    One executed trade.
    (utc_time, market) is the natural key; a second row with the same key replaces the first.
    """
    __tablename__ = 'trades'
    __table_args__ = (
        UniqueConstraint('utc_time', 'market', name='uq_trades_utc_time_market'),
    )

    id = Column(Integer, primary_key=True)
    utc_time = Column(DateTime, nullable=False, index=True)
    operation = Column(String(4), nullable=False)
    market = Column(String, nullable=False)
    amount = Column(ExactDecimal, nullable=False)
    price = Column(ExactDecimal, nullable=False)
    base_coin = Column(String, nullable=False, index=True)
    quote_coin = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
