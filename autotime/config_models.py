from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from autotime import CONFIG_PATH, PROJECT_ROOT
from autotime.errors import ConfigurationError
from autotime.logging_config import get_logger

logger = get_logger(__name__)

# BigTime allows one request every two seconds
MIN_SUBMIT_INTERVAL_SECONDS = 2.0


# =============================================================================
# AutotimeConfig (args/autotime.yaml)
# =============================================================================

class BigTimeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    base_url: str = Field(default="https://iq.bigtime.net/BigtimeData/api/v2")
    timeout_seconds: float = Field(default=30.0, gt=0)
    budget_category_id: int = Field(default=129171)


class HistoryConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    lookback_value: int = Field(default=3, ge=1)
    lookback_unit: Literal["days", "weeks", "months"] = Field(default="months")


class GenerationConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_days: int = Field(default=5, ge=1)
    min_daily_hours: float = Field(default=8.0, ge=0)
    max_daily_hours: float = Field(default=9.0, gt=0)
    time_increment_minutes: int = Field(default=15, ge=1, le=60)
    max_attempts_per_day: int = Field(default=1000, ge=1)
    excluded_projects: list[str] = Field(default_factory=list)

    @field_validator("time_increment_minutes")
    @classmethod
    def _divides_hour(cls, value: int) -> int:
        if 60 % value != 0:
            raise ValueError("time_increment_minutes must divide 60 evenly")
        return value


class SubmissionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    delay_seconds: float = Field(default=MIN_SUBMIT_INTERVAL_SECONDS, ge=MIN_SUBMIT_INTERVAL_SECONDS)


class ResultsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    directory: str = Field(default="results")

    def resolve(self) -> Path:
        path = Path(self.directory)
        return path if path.is_absolute() else PROJECT_ROOT / path


class AutotimeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    bigtime: BigTimeConfig = Field(default_factory=BigTimeConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)
    results: ResultsConfig = Field(default_factory=ResultsConfig)


# =============================================================================
# Environment overrides
# =============================================================================

# env var -> (section, key)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "BIGTIME_SAMPLE_NUM_ENTRIES": ("generation", "window_days"),
    "BIGTIME_SAMPLE_MIN_DAILY_HOURS": ("generation", "min_daily_hours"),
    "BIGTIME_SAMPLE_MAX_DAILY_HOURS": ("generation", "max_daily_hours"),
    "BIGTIME_SAMPLE_TIME_INCREMENT_MINUTES": ("generation", "time_increment_minutes"),
    "BIGTIME_SAMPLE_DATA_START_VALUE": ("history", "lookback_value"),
    "BIGTIME_SAMPLE_DATA_START_KEY": ("history", "lookback_unit"),
    "BIGTIME_BUDGET_CATEGORY_ID": ("bigtime", "budget_category_id"),
    "BIGTIME_BASE_URL": ("bigtime", "base_url"),
}


def apply_env_overrides(raw: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Return a copy of ``raw`` with BIGTIME_* environment values layered on top."""
    environ = os.environ if environ is None else environ
    merged = {
        section: dict(values) if isinstance(values, dict) else values
        for section, values in raw.items()
    }

    for var, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            merged.setdefault(section, {})[key] = value

    excluded = environ.get("BIGTIME_EXCLUDED_PROJECTS")
    if excluded:
        merged.setdefault("generation", {})["excluded_projects"] = [
            name.strip() for name in excluded.split(",") if name.strip()
        ]

    return merged


# =============================================================================
# load_config
# =============================================================================

def load_config(path: Path | None = None, environ: dict[str, str] | None = None) -> AutotimeConfig:
    """
    Load and validate args/autotime.yaml.

    A missing file means defaults. A file that fails validation is a
    configuration error; a bad hours band must never silently fall back.
    """
    yaml_path = path or CONFIG_PATH

    if yaml_path.exists():
        with open(yaml_path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Cannot parse {yaml_path}: {e}") from e
    else:
        logger.debug("config_file_missing", path=str(yaml_path))
        raw = {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{yaml_path} must contain a mapping at the top level")

    try:
        return AutotimeConfig.model_validate(apply_env_overrides(raw, environ))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {yaml_path}: {e}") from e


__all__ = [
    "AutotimeConfig",
    "BigTimeConfig",
    "GenerationConfig",
    "HistoryConfig",
    "MIN_SUBMIT_INTERVAL_SECONDS",
    "ResultsConfig",
    "SubmissionConfig",
    "apply_env_overrides",
    "load_config",
]
