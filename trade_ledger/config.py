"""Application configuration and environment settings"""
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite:///trades.db"

class DatabaseSettings(BaseModel):
    """PostgreSQL connection settings"""
    host: str = Field(..., description="Database host")
    port: str = Field(..., description="Database port")
    name: str = Field(..., description="Database name")
    user: str = Field(..., description="Database user")
    password: str = Field(..., description="Database password")
    ssl_mode: str = Field("require", description="libpq sslmode")

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Full connection URL wins over the individual DB_* settings
    DATABASE_URL: Optional[str] = Field(None, description="SQLAlchemy database URL")

    DB_HOST: Optional[str] = Field(None, description="Database host")
    DB_PORT: str = Field("5432", description="Database port")
    DB_NAME: str = Field("trades", description="Database name")
    DB_USER: str = Field("trades", description="Database user")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password")
    DB_SSL_MODE: str = Field("prefer", description="libpq sslmode")

    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # Input/Output directories with defaults
    INPUT_DIR: str = Field("uploads", description="Directory scanned for uploaded CSV files")
    OUTPUT_DIR: str = Field("output", description="Directory for results.json")
    REMOVE_AFTER_INGEST: bool = Field(False, description="Delete the uploaded file once ingested")

    @property
    def database_settings(self) -> Optional[DatabaseSettings]:
        """Get PostgreSQL settings as a separate model, if configured"""
        if not self.DB_HOST or not self.DB_PASSWORD:
            return None
        return DatabaseSettings(
            host=self.DB_HOST,
            port=self.DB_PORT,
            name=self.DB_NAME,
            user=self.DB_USER,
            password=self.DB_PASSWORD,
            ssl_mode=self.DB_SSL_MODE
        )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()
