from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration settings for the order notification service"""

    # Application settings
    service_name: str = "sparkd-notifications"
    log_level: str = "INFO"
    environment: str = "dev"

    # Firebase settings
    firebase_secret: Optional[str] = None
    firebase_project_id: Optional[str] = None

    # Firestore collections
    orders_collection: str = "orders"
    users_collection: str = "users"
    notifications_collection: str = "notifications"

    # FCM delivery hints
    android_channel_id: str = "sparkd_orders"

    # Cleanup settings
    notification_retention_days: int = 30
    cleanup_interval_hours: int = 24
    cleanup_on_startup: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


# Create settings instance
settings = Settings()
