# trade_ledger/db.py
"""Engine and session lifecycle for the trade ledger"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from trade_ledger.models.db import Base
from trade_ledger.db_config import DatabaseManager
from trade_ledger.services.storage import StorageService

logger = logging.getLogger(__name__)

class Database:
    """Owns the engine; hands out one session, or one trade store, per unit of work"""

    def __init__(self):
        self._engine = None
        self._SessionLocal = None

    @property
    def initialized(self) -> bool:
        return self._SessionLocal is not None

    def init(self, connection_string: Optional[str] = None) -> None:
        """
        Connect and create the trades table if it is missing.

        Args:
            connection_string: Overrides the URL resolved from settings

        Raises:
            ValueError: If the configured URL is not supported
            SQLAlchemyError: If the database cannot be reached
        """
        try:
            connection_string = connection_string or DatabaseManager.initialize_from_env()
            self._engine = create_engine(connection_string)
            Base.metadata.create_all(self._engine)
            # Trade records are read back after the per-upsert commit
            self._SessionLocal = sessionmaker(bind=self._engine, expire_on_commit=False)
            logger.info(f"Trade ledger database ready ({self._engine.url.get_backend_name()})")
        except (ValueError, SQLAlchemyError) as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    def get_session(self) -> Session:
        if not self._SessionLocal:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._SessionLocal()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on any error"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def store(self) -> Generator[StorageService, None, None]:
        """
        Trade store bound to a fresh session, for one CLI command or request.

        Usage:
            with db.store() as store:
                BalanceService(store).get_balances(cutoff)
        """
        with self.session() as session:
            yield StorageService(session)

    def dispose(self) -> None:
        if self._engine:
            self._engine.dispose()
            self._engine = None
            self._SessionLocal = None

# Global database instance
db = Database()
