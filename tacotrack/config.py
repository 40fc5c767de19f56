"""
Configuration management for TacoTrack
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "TacoTrack Inventory Dashboard"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "*"  # Comma-separated

    # Database
    database_url: str = "sqlite:///./tacotrack.db"

    # Read cache
    cache_ttl_seconds: int = 300

    # Analytics windows
    trailing_window_days: int = 7  # Window for average daily usage / sales

    # Stock runway
    critical_days_threshold: float = 2.0
    warning_days_threshold: float = 4.0
    days_of_stock_sentinel: float = 999.0
    low_stock_threshold_days: float = 3.0
    expiring_soon_days: int = 3
    expiry_alert_days: int = 2

    # Reordering
    include_lead_time_in_orders: bool = True

    # Recipe costing: raise instead of silently costing unknown ingredients at 0
    strict_ingredient_references: bool = False

    # Forecasting
    forecast_history_days: int = 60
    forecast_default_days: int = 7
    forecast_fetch_timeout_seconds: float = 5.0
    forecast_recent_limit: int = 100

    # LLM Configuration
    anthropic_api_key: Optional[str] = None
    llm_model: str = "claude-sonnet-4-20250514"
    enable_llm_insights: bool = True
    llm_max_tokens: int = 2000

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
