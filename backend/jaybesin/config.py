"""
Application settings
- Database, Redis, write timeout and tracking defaults.
- Business settings (rates, bank details, branding) live in the persisted
  config/global document, not here.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///jaybesin.db"

    # Redis (falls back to in-memory queues when unreachable)
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # Upper bound for any single store write (seconds)
    WRITE_TIMEOUT_SECONDS: float = 10.0

    # Domain embedded in customer notifications
    TRACKING_DOMAIN: str = "jaybesin.com"

    # Default freight rate offered on a new manifest form (USD per CBM)
    DEFAULT_RATE_PER_CBM: float = 450.0

    # Regeneration attempts when a tracking number already exists
    TRACKING_ID_MAX_ATTEMPTS: int = 5

    # Where exported PDFs are written
    PDF_OUTPUT_DIR: str = "exports"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
