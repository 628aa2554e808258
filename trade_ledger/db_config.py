# trade_ledger/db_config.py
"""Database connection string resolution"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus, urlparse

from trade_ledger.config import DEFAULT_DATABASE_URL, Settings, settings as default_settings

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ('sqlite', 'postgresql', 'postgresql+psycopg2', 'postgresql+psycopg')

@dataclass
class DatabaseCredentials:
    """Database credentials container with validation"""
    host: str
    port: str
    name: str
    user: str
    password: str
    ssl_mode: str = 'prefer'

    def to_connection_string(self) -> str:
        """Generate database connection string with proper escaping"""
        return (
            f"postgresql://{quote_plus(self.user)}:{quote_plus(self.password)}@{self.host}:{self.port}/"
            f"{self.name}?sslmode={self.ssl_mode}"
        )

    @classmethod
    def from_settings(cls, config: Settings) -> Optional['DatabaseCredentials']:
        """Create credentials from settings, or None when DB_HOST/DB_PASSWORD are unset"""
        db_settings = config.database_settings
        if db_settings is None:
            return None
        return cls(
            host=db_settings.host,
            port=db_settings.port,
            name=db_settings.name,
            user=db_settings.user,
            password=db_settings.password,
            ssl_mode=db_settings.ssl_mode
        )

def validate_url(url: str) -> bool:
    """Check that a database URL uses a scheme this service knows how to drive"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in SUPPORTED_SCHEMES

class DatabaseManager:
    """Resolves which database the service connects to"""

    @classmethod
    def initialize_from_env(cls, config: Optional[Settings] = None) -> str:
        """
        Resolve the connection string from settings.

        Order: DATABASE_URL, then DB_* credentials, then the local SQLite file.

        Returns:
            Database connection string

        Raises:
            ValueError: If DATABASE_URL uses an unsupported scheme
        """
        config = config or default_settings

        if config.DATABASE_URL:
            if not validate_url(config.DATABASE_URL):
                raise ValueError(f"Unsupported DATABASE_URL scheme: {urlparse(config.DATABASE_URL).scheme}")
            return config.DATABASE_URL

        credentials = DatabaseCredentials.from_settings(config)
        if credentials:
            return credentials.to_connection_string()

        logger.info(f"No database configured, falling back to {DEFAULT_DATABASE_URL}")
        return DEFAULT_DATABASE_URL
