# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)

_INSECURE_SECRETS = ("dev", "development", "test", "")


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///vidhub.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class TokenConfig(BaseSettings):
    access_secret: str = Field("dev", alias="ACCESS_TOKEN_SECRET")
    refresh_secret: str = Field("dev-refresh", alias="REFRESH_TOKEN_SECRET")
    access_ttl: timedelta = Field(timedelta(minutes=15), alias="ACCESS_TOKEN_TTL")
    refresh_ttl: timedelta = Field(timedelta(days=10), alias="REFRESH_TOKEN_TTL")
    algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    issuer: str = Field("vidhub", alias="JWT_ISSUER")

    model_config = _SECTION_CONFIG


class AssetStoreConfig(BaseSettings):
    cloud_name: str = Field("", alias="CLOUDINARY_CLOUD_NAME")
    api_key: str = Field("", alias="CLOUDINARY_API_KEY")
    api_secret: str = Field("", alias="CLOUDINARY_API_SECRET")
    base_url: str = Field("https://api.cloudinary.com/v1_1", alias="CLOUDINARY_BASE_URL")
    folder: str | None = Field(None, alias="CLOUDINARY_FOLDER")
    timeout: float = Field(30.0, ge=0.1, alias="ASSET_TIMEOUT")

    model_config = _SECTION_CONFIG


class StageConfig(BaseSettings):
    directory: Path = Field(Path("public/temp"), alias="STAGE_DIR")
    max_upload_bytes: int = Field(10 * 1024 * 1024, ge=1, alias="MAX_UPLOAD_BYTES")

    model_config = _SECTION_CONFIG


class SecurityConfig(BaseSettings):
    # None means "secure in production only"
    cookie_secure: bool | None = Field(None, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")

    allowed_origins: list[str] = Field(["*"], alias="ALLOWED_ORIGINS")

    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, alias="RL_WINDOW")

    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _token_config_factory() -> TokenConfig:
    return TokenConfig()  # type: ignore[call-arg]


def _asset_store_config_factory() -> AssetStoreConfig:
    return AssetStoreConfig()  # type: ignore[call-arg]


def _stage_config_factory() -> StageConfig:
    return StageConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    tokens: TokenConfig = Field(default_factory=_token_config_factory)
    assets: AssetStoreConfig = Field(default_factory=_asset_store_config_factory)
    stage: StageConfig = Field(default_factory=_stage_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        insecure = [
            name
            for name, value in (
                ("SECRET_KEY", self.secret_key),
                ("ACCESS_TOKEN_SECRET", self.tokens.access_secret),
                ("REFRESH_TOKEN_SECRET", self.tokens.refresh_secret),
            )
            if value in _INSECURE_SECRETS or value == "dev-refresh"
        ]
        if insecure:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure secrets detected in production!\n"
                f"   {', '.join(insecure)} must be strong random values in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if self.security.cookie_secure is False:
            warnings.append("⚠️  Cookie Secure flag is explicitly DISABLED (use HTTPS!)")
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.assets.cloud_name:
            warnings.append("⚠️  CLOUDINARY_CLOUD_NAME is not set, uploads will fail")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    def cookie_secure(self) -> bool:
        if self.security.cookie_secure is not None:
            return self.security.cookie_secure
        return self.is_production()


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "AssetStoreConfig",
    "DatabaseConfig",
    "SecurityConfig",
    "StageConfig",
    "TokenConfig",
    "load_config",
]
