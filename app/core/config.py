import os
from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # API Config
    API_TITLE: str = "Marketplace API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Multi-vendor marketplace API: users, categories, products and vendors"
    ENV: str = os.getenv("ENV", "development")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://user:pass@db:5432/marketplace")

    # Redis (session store + rate limiting)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Sessions
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_PREFIX: str = "sess:"
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))  # 1 hora, sliding
    COOKIE_DOMAIN: Optional[str] = os.getenv("COOKIE_DOMAIN", None)

    # Security
    CSRF_ENABLED: bool = os.getenv("CSRF_ENABLED", "true").lower() == "true"
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    LOGIN_RATE_LIMIT: int = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    LOGIN_RATE_WINDOW_SECONDS: int = int(os.getenv("LOGIN_RATE_WINDOW_SECONDS", "60"))

    # CORS
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE", None)

    # Scheduled tasks
    SCHEDULER_ENABLED: bool = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    LOW_STOCK_CHECK_HOURS: int = int(os.getenv("LOW_STOCK_CHECK_HOURS", "6"))

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    class Config:
        env_file = ".env"

settings = Settings()
