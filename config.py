"""
Configuration management for the Issue Tracker Analytics service
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


_ENV_CONFIG = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class DatabaseSettings(BaseSettings):
    """Database configuration"""
    model_config = _ENV_CONFIG

    database_url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL, overrides the postgres_* fields")

    postgres_host: str = Field(default="localhost")
    postgres_port: int = Field(default=5432)
    postgres_db: str = Field(default="bugtracker")
    postgres_user: str = Field(default="postgres")
    postgres_password: str = Field(default="password")

    @property
    def url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"


class SecuritySettings(BaseSettings):
    """Token verification configuration"""
    model_config = _ENV_CONFIG

    jwt_secret_key: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")


class AnalyticsSettings(BaseSettings):
    """Analytics engine configuration"""
    model_config = _ENV_CONFIG

    analytics_cache_ttl_seconds: float = Field(default=300.0, gt=0)  # 5 minutes
    analytics_model_version: str = Field(default="v2.1.0")


class AppSettings(BaseSettings):
    """Main application settings"""
    model_config = _ENV_CONFIG

    app_name: str = Field(default="Bug Tracker Analytics API")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    log_level: str = Field(default="INFO")
    cors_origins: List[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


class Settings(BaseSettings):
    """Combined settings"""
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    analytics: AnalyticsSettings = AnalyticsSettings()
    app: AppSettings = AppSettings()

    model_config = _ENV_CONFIG


# Global settings instance
settings = Settings()
