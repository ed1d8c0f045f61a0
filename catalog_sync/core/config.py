from decimal import Decimal
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Source catalog (relational database)
    source_database_url: str = "sqlite:///./catalog.db"
    source_web_flag: str = "I"
    source_sale_flag: str = "I"

    # WooCommerce REST API
    wc_base_url: str = "https://shop.localhost"
    wc_consumer_key: str = ""
    wc_consumer_secret: str = ""
    wc_api_version: str = "wc/v3"
    wc_request_timeout: int = 60
    wc_verify_ssl: bool = True
    wc_page_size: int = 100
    wc_batch_size: int = 100

    # WordPress media API
    wp_media_url: Optional[str] = None  # defaults to <wc_base_url>/wp-json/wp/v2/media
    wp_username: str = ""
    wp_app_password: str = ""
    wp_auth_header: str = ""
    wp_cookie: str = ""
    wp_request_timeout: int = 30

    # Reconciliation
    cache_lifespan: int = 20
    sync_interval_minutes: int = 10
    price_markup_factor: Decimal = Decimal("1.2")

    # Celery / Redis
    celery_broker_url: str = "redis://redis:6379/0"
    celery_result_backend: str = "redis://redis:6379/1"
    celery_task_serializer: str = "json"
    celery_result_serializer: str = "json"
    celery_accept_content: List[str] = ["json"]
    celery_timezone: str = "UTC"
    celery_enable_utc: bool = True
    sync_lock_key: str = "catalog_sync:cycle"
    sync_lock_timeout: int = 1800
    # Seconds a queued cycle message stays valid before the worker discards it
    sync_trigger_expires: int = 60

    # Alerts
    alerts_enabled: bool = False
    alert_slack_enabled: bool = False
    alert_slack_webhook_url: str = ""
    alert_telegram_enabled: bool = False
    alert_telegram_bot_token: str = ""
    alert_telegram_chat_id: str = ""
    alert_webhook_enabled: bool = False
    alert_webhook_url: str = ""

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def media_endpoint(self) -> str:
        if self.wp_media_url:
            return self.wp_media_url.rstrip("/")
        return f"{self.wc_base_url.rstrip('/')}/wp-json/wp/v2/media"


settings = Settings()
