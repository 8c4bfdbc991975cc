"""Typed settings for the comparison service.

Non-secret values come from YAML under ``config/`` (see ``yaml_source``),
the Gemini key comes from the environment or ``.env``, and any nested value
can be overridden with a ``SECTION__FIELD`` environment variable.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


class ProviderSettings(BaseModel):
    """Where and how to reach Gemini ``generateContent``."""

    base_url: str = "https://generativelanguage.googleapis.com"
    api_version: str = Field(default="v1beta", min_length=1)
    model: str = Field(default="gemini-1.5-flash", min_length=1)
    timeout: float = Field(default=30.0, gt=0)


class QuotaSettings(BaseModel):
    """Calls allowed per window; the defaults fit the free tier."""

    capacity: int = Field(default=6, ge=1)
    period_seconds: float = Field(default=60.0, gt=0)


class RetrySettings(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    default_delay_seconds: float = Field(default=30.0, ge=0)


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=86400, gt=0)


class AppSettings(BaseModel):
    name: str = "Product Comparison Service"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080


class ApiSettings(BaseModel):
    prefix: str = "/api"
    cors_origins: list[str] = []


class LoggingSettings(BaseModel):
    """``format`` is ``json`` or ``text``."""

    level: str = "INFO"
    format: str = "json"


class MetricsSettings(BaseModel):
    enabled: bool = True


class ObservabilitySettings(BaseModel):
    metrics: MetricsSettings = MetricsSettings()


class Settings(BaseSettings):
    """Root settings object.

    Sources, strongest first: constructor arguments, environment variables,
    ``.env``, ``config/environments/{APP_ENV}/*.yaml``, ``config/base/*.yaml``,
    then the defaults above. ``QUOTA__CAPACITY=10`` sets ``quota.capacity``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    APP_ENV: str = "development"
    GEMINI_API_KEY: str = ""  # secret, never put in YAML

    provider: ProviderSettings = ProviderSettings()
    quota: QuotaSettings = QuotaSettings()
    retry: RetrySettings = RetrySettings()
    cache: CacheSettings = CacheSettings()
    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_settings = MultiYamlConfigSettingsSource(settings_cls)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    return Settings()
