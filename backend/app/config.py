"""Typed settings configuration - single source of truth."""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Tourbook Core API"

    # Pricing
    down_payment_rate: Decimal = Decimal("0.30")
    commission_rate: Decimal = Decimal("0.02")
    base_included_guests: int = 1

    # Guide tiers
    free_tier_booking_cap: int = 1

    # Transport collaborator
    api_base_url: str = "http://localhost:8000"
    token_refresh_path: str = "/api/token/refresh/"
    transport_timeout_seconds: float = 10.0

    # Idempotency TTL (seconds)
    idempotency_ttl_seconds: int = 24 * 3600

    # Logging
    log_level: str = "INFO"

    # Load the demo catalog into the in-memory repositories at startup
    seed_demo_catalog: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
