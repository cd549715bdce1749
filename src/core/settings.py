"""Runtime settings, read from RENTSIM_* environment variables or .env.

Modelling constants are not settings: see ``src.core.constants``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Feature flags
    debug_mode: bool = Field(default=False, description="Force DEBUG logging")
    enable_export: bool = Field(default=True, description="Write result files on save")
    output_dir: str = Field(default="results", description="Directory for saved results")

    # Sweeps
    monte_carlo_simulations: int = Field(default=1000, ge=1, le=100_000)
    monte_carlo_seed: Optional[int] = Field(default=42, description="Seed for reproducible draws")

    # Performance
    max_workers: int = Field(default=1, ge=1, le=64, description="Processes used for batch sweeps")

    model_config = {
        "env_prefix": "RENTSIM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
