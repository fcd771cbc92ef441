"""OpsDesk configuration system using Pydantic Settings."""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpsDeskConfig(BaseSettings):
    """Main configuration class. Loads from .env file and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "OPSDESK"
    debug: bool = False

    # Logging
    log_dir: Optional[str] = "logs"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    # Records
    record_variant: str = "incident"  # incident / ticket
    id_year: Optional[int] = None  # defaults to the current UTC year
    current_user_name: str = "Current User"
    seed_demo_data: bool = True

    # Roster workload
    workload_per_assignment: int = 25
    workload_cap: Optional[int] = None  # None keeps count * 25 unclamped

    @field_validator("record_variant")
    @classmethod
    def validate_record_variant(cls, v: str) -> str:
        allowed = {"incident", "ticket"}
        v = v.strip().lower()
        if v not in allowed:
            raise ValueError(f"record_variant must be one of {allowed}")
        return v

    @field_validator("workload_per_assignment")
    @classmethod
    def validate_workload_per_assignment(cls, v: int) -> int:
        if v < 0:
            raise ValueError("workload_per_assignment must not be negative")
        return v


def get_config() -> OpsDeskConfig:
    """Factory function to create config instance."""
    return OpsDeskConfig()
