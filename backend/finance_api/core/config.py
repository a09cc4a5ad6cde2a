import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "Brand Finance API"
    database_url: str = Field(
        default="sqlite:///./brand_finance.db",
        description="SQLAlchemy database URL, e.g. postgresql+psycopg://user:pass@db:5432/finance",
    )
    cors_origins: list[AnyHttpUrl] = []
    log_level: str = "INFO"
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")
    otlp_endpoint: str | None = Field(default=None, description="OTLP endpoint for traces/metrics")

    currency: str = Field(default="EGP", description="Currency label used in notification messages")
    approved_cost_category: str = Field(
        default="operational", description="Category given to costs booked from approved salary payments"
    )
    wallet_low_budget_pct: Decimal = Field(
        default=Decimal("20"), gt=0, le=100, description="Remaining wallet budget percentage that triggers a warning"
    )

    model_config = SettingsConfigDict(env_prefix="LEDGER_", extra="ignore")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[AnyHttpUrl]) -> list[AnyHttpUrl]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("LEDGER_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None


settings = get_settings()
