"""Core configuration management using Pydantic settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator, field_validator
from typing import Optional


# Valid log levels
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Telegram
    telegram_bot_token: str

    # Solana RPC (only reported on the status page)
    rpc_url: Optional[str] = None

    # Marketplace API
    marketplace_base_url: str = "https://api-mainnet.magiceden.dev/v2"
    http_timeout_seconds: float = 30.0

    # Resilient fetch policy
    fetch_max_retries: int = 3
    fetch_retry_delay_ms: int = 1000
    metadata_max_retries: int = 2
    metadata_retry_delay_ms: int = 500

    # Alert evaluator
    alert_check_interval_seconds: int = 30

    # Collection poller
    collection_poll_interval_minutes: int = 5
    collection_notify_on_change_only: bool = False
    default_collection_symbol: str = "trench_demons"

    # Sale notifier
    sale_window_seconds: int = 60
    sale_message_delay_ms: int = 300
    delivery_timeout_seconds: float = 15.0
    lastbuy_limit: int = 5

    # Scheduled sale feed (disabled unless a chat id is configured)
    sale_feed_symbol: str = "trench_demons"
    sale_feed_chat_id: Optional[int] = None
    sale_feed_cron: str = "* * * * *"
    sale_feed_limit: int = 5

    # Status page (disabled when unset)
    status_port: Optional[int] = 10000

    # Logging
    log_level: str = "INFO"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        return upper_v

    @model_validator(mode='after')
    def validate_config(self) -> 'Settings':
        """Validate configuration after all fields are set."""
        if self.fetch_max_retries < 1 or self.metadata_max_retries < 1:
            raise ValueError("Retry budgets must allow at least one attempt")
        if self.sale_window_seconds <= 0:
            raise ValueError("sale_window_seconds must be positive")
        return self


# Global settings instance
settings = Settings()
