from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """SDK and host settings with environment-based configuration"""

    # Application
    app_name: str = "Zammad SDK Notification Host"
    app_version: str = "1.0.0"
    debug: bool = False

    # Logging
    log_level: str = "INFO"

    # Zammad API
    zammad_url: Optional[str] = None
    zammad_token: Optional[str] = None
    zammad_username: Optional[str] = None
    zammad_password: Optional[str] = None
    zammad_timeout: float = 100.0
    zammad_max_retries: int = 3

    # Request rate limiting (sliding window)
    zammad_rate_limit_requests: int = 60
    zammad_rate_limit_window: int = 60

    # Webhooks
    zammad_webhook_path: str = "/webhooks/zammad"
    zammad_webhook_secret: Optional[str] = None
    zammad_signature_header: str = "X-Zammad-Signature"
    zammad_event_header: str = "X-Zammad-Event"

    # Polling fallback
    zammad_polling_enabled: bool = False
    zammad_poll_interval: float = 30.0
    zammad_poll_page_size: int = 200

    @field_validator("zammad_webhook_path")
    @classmethod
    def validate_webhook_path(cls, v):
        if not v.startswith("/"):
            return "/" + v
        return v

    @field_validator("zammad_poll_interval")
    @classmethod
    def validate_poll_interval(cls, v):
        if v <= 0:
            raise ValueError("Poll interval must be greater than 0")
        return v

    @property
    def zammad_webhook_secret_configured(self) -> bool:
        """Whether webhook payloads will be signature-checked"""
        return bool(self.zammad_webhook_secret and self.zammad_webhook_secret.strip())

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_parse_none_str="None",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
