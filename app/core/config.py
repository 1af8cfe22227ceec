from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Common env vars (.env):
      - DATABASE_URL (SQLAlchemy URL; SQLite file by default)
      - JWT_SECRET (HMAC secret used to sign access tokens)

    Optional:
      - ADMIN_EMAIL / ADMIN_PASSWORD (bootstrap an admin account on startup)
      - CORS_ORIGINS (comma-separated, "*" allows everything)
    """

    PROJECT_NAME: str = "PC Parts Shop API"
    API_PREFIX: str = "/api"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./pc_parts_shop.db"

    # Access tokens
    JWT_SECRET: str = "your-jwt-secret-key-change-in-production"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_TTL_HOURS: int = 24

    # Shopping sessions (cart)
    SESSION_TTL_DAYS: int = 7

    CORS_ORIGINS: str = "*"

    # Admin bootstrap
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        """Split comma-separated CORS origins into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
