"""Configuration management for the schedule-copy tool."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .schedule_checker import ScheduleChecker

MAX_VERBOSE = 4

# YAML keys accepted as aliases of the model fields
FIELD_ALIASES = {
    "from": "sources",
    "to": "destination",
    "cron": "cron_expr",
    "threads": "parallel_threads",
}


class CopyConfig(BaseModel):
    """Validated settings for one copy job."""

    sources: List[str] = Field(
        min_length=1, description="Directories (or files) to copy from"
    )
    destination: str = Field(description="Directory receiving the copied files")
    verbose: int = Field(
        default=0, ge=0, description="Verbosity: 0 error, 1 warn, 2 info, 3 debug, 4 trace"
    )
    parallel_threads: Optional[int] = Field(
        default=None, description="Number of copy workers (defaults to the CPU count)"
    )
    cron_expr: Optional[str] = Field(
        default=None,
        description="Cron schedule: 5 fields, or 6 fields with leading seconds",
    )
    log_file: Optional[str] = Field(
        default=None, description="Optional log file written alongside the console"
    )
    dry_run: bool = Field(
        default=False, description="Only report what would be copied"
    )
    max_runs: Optional[int] = Field(
        default=None, description="Stop after this many scheduled runs"
    )

    @field_validator("verbose")
    @classmethod
    def validate_verbose(cls, v: int) -> int:
        if v > MAX_VERBOSE:
            raise ValueError(f"invalid arg: {MAX_VERBOSE} < {v} number of verbose")
        return v

    @field_validator("parallel_threads", "max_runs")
    @classmethod
    def validate_positive(cls, v: Optional[int]) -> Optional[int]:
        """Reject zero and negative counts."""
        if v is not None and v < 1:
            raise ValueError(f"must be a positive integer, got {v}")
        return v

    @field_validator("cron_expr")
    @classmethod
    def validate_cron_expr(cls, v: Optional[str]) -> Optional[str]:
        """Validate the cron schedule format."""
        if v is None:
            return v
        v = v.strip()
        schedule_parts = v.split()
        if len(schedule_parts) not in (5, 6):
            raise ValueError(
                "Schedule must have 5 fields 'minute hour day-of-month month day-of-week' "
                "or 6 fields with a leading seconds field"
            )
        if not ScheduleChecker.validate_schedule_format(v):
            raise ValueError(f"Invalid cron schedule format: {v}")
        return v

    @field_validator("sources")
    @classmethod
    def validate_sources(cls, v: List[str]) -> List[str]:
        for path in v:
            if not path.strip():
                raise ValueError("source paths must not be empty")
        return v

    @model_validator(mode="after")
    def validate_sources_unique(self) -> CopyConfig:
        """Ensure the same source is not listed twice."""
        if len(set(self.sources)) != len(self.sources):
            raise ValueError(f"duplicated paths: {self.sources}")
        return self

    @property
    def source_paths(self) -> List[Path]:
        return [Path(os.path.expanduser(p)) for p in self.sources]

    @property
    def destination_path(self) -> Path:
        return Path(os.path.expanduser(self.destination))

    @property
    def is_scheduled(self) -> bool:
        return self.cron_expr is not None


def load_config(config_path: str) -> Dict[str, Any]:
    """Load a YAML configuration file into a plain mapping."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format in config file: {e}")

    if config_data is None:
        raise ValueError("Configuration file is empty")
    if not isinstance(config_data, dict):
        raise ValueError(
            f"Configuration file must contain a mapping, got {type(config_data).__name__}"
        )

    return {FIELD_ALIASES.get(key, key): value for key, value in config_data.items()}


def build_config(
    file_data: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> CopyConfig:
    """
    Merge file values with command line values and validate the result.

    Args:
        file_data: Mapping read by load_config (may be None)
        overrides: Values given on the command line; None entries are ignored

    Returns:
        The validated configuration

    Raises:
        ValueError: If the merged settings are invalid
    """
    merged: Dict[str, Any] = dict(file_data or {})
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        # Empty lists and unset flags fall back to the file values
        if isinstance(value, list) and not value and key in merged:
            continue
        if value is False and key in merged:
            continue
        if key == "verbose" and value == 0 and key in merged:
            continue
        merged[key] = value

    try:
        return CopyConfig(**merged)
    except ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}") from e
