from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upstream platform API (members, executives, package stats)
    platform_api_url: str = "http://localhost:4000"
    platform_api_timeout_seconds: float = 30.0

    # Report
    report_prefix: str = "FMC"
    report_title: str = "FINITE MARSHALL CLUB - ANALYTICS REPORT"
    report_timezone: str = "UTC"
    currency_symbol: str = "₹"
    # Directory used by save_report(); the HTTP route streams the file instead.
    report_output_dir: str = "reports"

    # App
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    # Can be a comma-separated string or list
    cors_allowed_origins: Union[str, list[str]] = "http://localhost:3000,http://localhost:5173"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.report_timezone)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @field_validator("platform_api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Endpoint paths are joined with a leading slash."""
        if not v:
            raise ValueError("PLATFORM_API_URL is required")
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("report_timezone", mode="before")
    @classmethod
    def check_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
