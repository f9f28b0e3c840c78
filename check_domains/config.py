"""
Configuration settings for check-domains.

Uses Pydantic Settings to load environment variables for the worker pool,
probe behaviour and logging. CLI options override these values per run.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from check_domains.domain.models import PoolConfig


class Settings(BaseSettings):
    # Worker pool
    workers: int = Field(50, ge=1, alias="CHECK_DOMAINS_WORKERS")
    queue_capacity: int = Field(10, ge=1, alias="CHECK_DOMAINS_QUEUE_CAPACITY")

    # Probe
    probe_port: int = Field(443, ge=1, le=65535, alias="CHECK_DOMAINS_PORT")
    probe_timeout_seconds: float = Field(10.0, gt=0, alias="CHECK_DOMAINS_TIMEOUT")
    report_failures: bool = Field(False, alias="CHECK_DOMAINS_REPORT_FAILURES")

    # Application
    log_level: str = Field("WARNING", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def pool_config(self) -> PoolConfig:
        return PoolConfig(workers=self.workers, queue_capacity=self.queue_capacity)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
