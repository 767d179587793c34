# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized server settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HS256 signing secret shared with the session issuer)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - CORS_ORIGINS (JSON list of allowed storefront origins)
    """

    PROJECT_NAME: str = "Storefront Cart API"
    API_V1_STR: str = "/api/v1"

    # DB config
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class ClientSettings(BaseSettings):
    """
    Settings for the cart controller running next to the UI.

    Env vars use the STOREFRONT_ prefix, e.g. STOREFRONT_API_URL.
    """

    API_URL: str = "http://localhost:8000/api/v1"

    # Upper bound for every cart/catalog request, in seconds
    CART_REQUEST_TIMEOUT: float = 10.0

    # Where the anonymous cart is kept between runs
    LOCAL_STORAGE_DIR: str = ".storefront"
    LOCAL_CART_KEY: str = "tempCart"

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="STOREFRONT_", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()


@lru_cache
def get_client_settings() -> ClientSettings:
    return ClientSettings()
