"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 500

    # Restaurant
    restaurant_name: str = "Restaurant"

    # Menu
    menu_api_url: Optional[str] = None
    menu_file: Optional[str] = None
    menu_cache_ttl_seconds: float = 300.0
    menu_summary_items_per_category: int = 6
    tolerate_menu_failure: bool = False

    # Ordering
    tax_rate: float = 0.08
    number_locale: str = "en"

    # Fulfillment
    order_submission_url: Optional[str] = None
    api_key: Optional[str] = None
    submission_max_retries: int = 3
    submission_initial_delay_seconds: float = 1.0
    submission_backoff_factor: float = 2.0
    http_timeout_seconds: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
