from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    APP_NAME: str = "Shopledger Catalog & Order API"
    APP_VERSION: str = "1.0.0"

    DATABASE_URL: str = "sqlite:///./ecommerce.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    TOP_SELLERS_LIMIT: int = 5
    SEED_SAMPLE_PRODUCTS: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
