"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FORECAST_",
        extra="ignore",
    )

    # Database (balance state persistence)
    database_url: str = "sqlite:///./household_forecast.db"

    # Service
    service_name: str = "household-forecast"
    log_level: str = "INFO"

    # Projection
    history_months: int = 3
    safety_buffer_percent: float = 10.0

    # Insight thresholds
    insight_risk_ratio: float = 0.2  # pending expenses share that still counts as risky
    largest_expense_ratio: float = 0.5

    # Risk assessment
    risk_preview_min_days: int = 5
    coverage_window_days: int = 7

    # Risk event webhook (disabled when unset)
    notification_webhook_url: Optional[str] = None
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds


settings = Settings()
