from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration."""

    min_multiplier: float = Field(default=0.1, gt=0.0)
    max_multiplier: float = Field(default=5.0, gt=0.0)
    junctions_path: Optional[str] = Field(default=None)
    roads_path: Optional[str] = Field(default=None)
    api_prefix: str = Field(default="/api")
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    query_timeout_s: float = Field(default=5.0, gt=0.0)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_OPTIMIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _check_multiplier_bounds(self) -> "Settings":
        if self.min_multiplier > self.max_multiplier:
            raise ValueError("min_multiplier must not exceed max_multiplier")
        if (self.junctions_path is None) != (self.roads_path is None):
            raise ValueError("junctions_path and roads_path must be configured together")
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()
