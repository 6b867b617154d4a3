"""Application configuration from environment variables."""

from decimal import Decimal

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./rentledger.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Billing
    default_water_rate: Decimal = Field(
        default=Decimal("30"), ge=0, description="Standard water rate per unit"
    )
    default_electricity_rate: Decimal = Field(
        default=Decimal("8"), ge=0, description="Standard electricity rate per unit"
    )
    penalty_rate: Decimal = Field(
        default=Decimal("0.10"), ge=0, description="Overdue penalty ratio (0.10 = 10%)"
    )
    due_days: int = Field(default=30, ge=0, description="Days from create date to due date")
    import_due_day: int = Field(
        default=15, ge=1, le=28, description="Day of month imported invoices fall due"
    )
    auto_confirm_payments: bool = Field(
        default=False, description="Record new payments as CONFIRMED instead of PENDING"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Log file path")

    # API
    api_title: str = Field(default="rentledger API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")


# Global settings instance
settings = Settings()
