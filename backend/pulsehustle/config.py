from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./pulsehustle.db"
    secret_key: str = "dev-secret-key-change-in-production"
    # Shared secret checked against the x-api-key header on protected routes
    service_api_key: str = "dev-service-key"
    app_base_url: str = "http://localhost:3000"
    token_expire_days: int = 30
    log_level: str = "INFO"

    # Payment redirect rail
    payment_provider_url: str = "https://www.paypal.com/paypalme"
    payment_recipient_handle: str = "invinciblelude"
    gig_price: float = 600.0

    # Redis configuration
    redis_url: str = "redis://localhost:6379"
    cache_enabled: bool = False

    # Celery configuration
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"

    # Matching: "background" (asyncio task), "celery" or "inline"
    matching_dispatch: str = "background"
    matching_delay_seconds: float = 0.1
    matching_top_k: int = 5
    # Scoring function: "random" or "skills"
    matching_scorer: str = "random"

    # Periodic stats refresh
    scheduler_enabled: bool = True
    stats_refresh_minutes: int = 15

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
