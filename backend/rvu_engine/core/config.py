"""Application configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RVU_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "RVU Analytics Engine"
    debug: bool = False
    log_level: str = "INFO"
    structured_logging: bool = False

    # Billing defaults for the HTTP and CLI surfaces. Core functions always
    # take the rate from their caller.
    default_rate_per_rvu: float = Field(default=65.0, ge=0, allow_inf_nan=False)

    # Window counts per granularity
    weekly_window_count: int = Field(default=12, ge=1)
    monthly_window_count: int = Field(default=12, ge=1)
    yearly_window_count: int = Field(default=3, ge=1)

    # Trend comparison spans (number of windows per half)
    trend_compare_weeks: int = Field(default=4, ge=1)
    trend_compare_months: int = Field(default=1, ge=1)
    trend_compare_years: int = Field(default=1, ge=1)

    # Ranking and list sizes
    top_k: int = Field(default=10, ge=1)
    dashboard_list_size: int = Field(default=5, ge=1)
    recent_code_days: int = Field(default=7, ge=1)

    # API
    api_prefix: str = ""


settings = Settings()
