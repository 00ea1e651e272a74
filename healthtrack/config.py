"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()

SortByName = Literal["name", "age", "bmi", "healthScore", "createdAt"]
SortOrderName = Literal["asc", "desc"]


class DashboardConfig(BaseModel):
    """Record list behaviour."""

    page_size: int = Field(default=6, gt=0, description="Records shown per page")
    default_sort_by: SortByName = Field(
        default="createdAt", description="Sort field when the dashboard opens"
    )
    default_sort_order: SortOrderName = Field(
        default="desc", description="Sort direction when the dashboard opens"
    )
    fetch_limit: int = Field(
        default=100, gt=0, description="Records loaded for client-side filtering"
    )


class RecordSourceConfig(BaseModel):
    """Record storage collaborator settings."""

    timeout_seconds: float = Field(default=10.0, gt=0.0, description="Timeout per fetch")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    record_source: RecordSourceConfig = Field(default_factory=RecordSourceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    # Dashboard config with environment overrides
    dashboard_config = DashboardConfig(
        page_size=int(os.getenv("DASHBOARD_PAGE_SIZE", "6")),
        default_sort_by=cast(SortByName, os.getenv("DASHBOARD_SORT_BY", "createdAt")),
        default_sort_order=cast(
            SortOrderName, os.getenv("DASHBOARD_SORT_ORDER", "desc").strip().lower()
        ),
        fetch_limit=int(os.getenv("DASHBOARD_FETCH_LIMIT", "100")),
    )

    record_source_config = RecordSourceConfig(
        timeout_seconds=float(os.getenv("RECORD_SOURCE_TIMEOUT_SECONDS", "10.0")),
    )

    # Logging config
    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    # Application config
    return AppConfig(
        environment=environment,
        debug=debug,
        dashboard=dashboard_config,
        record_source=record_source_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


# Configuration validation and helpers
def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


# Development helpers
def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n📋 DASHBOARD CONFIGURATION")
    dashboard = config.dashboard
    print(f"Page Size: {dashboard.page_size}")
    print(f"Default Sort: {dashboard.default_sort_by} ({dashboard.default_sort_order})")
    print(f"Fetch Limit: {dashboard.fetch_limit}")

    print("\n🗄️  RECORD SOURCE CONFIGURATION")
    print(f"Timeout: {config.record_source.timeout_seconds}s")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()
