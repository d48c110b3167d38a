"""
NIGHTPLAN Configuration

Pydantic models for scheduler configuration, loaded from YAML with
environment variable overrides.

Resolution order (later wins):
    1. Model defaults
    2. First YAML file found (explicit path, or get_config_paths())
    3. NIGHTPLAN_<SECTION>_<FIELD> environment variables

Usage:
    from nightplan.config import load_config

    config = load_config()                    # defaults + discovered file
    config = load_config("observatory.yaml")  # explicit file
    print(config.scheduler.slot_step_minutes)
"""

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from nightplan.exceptions import ConfigurationError

if TYPE_CHECKING:
    from services.scheduling.models import Location

ENV_PREFIX = "NIGHTPLAN_"

# IANA zone names ("Region/City") plus the bare UTC/GMT aliases
_TIMEZONE_PATTERN = re.compile(r"^(UTC|GMT|[A-Za-z_]+(/[A-Za-z0-9_+\-]+)+)$")


# =============================================================================
# Section Models
# =============================================================================


class SiteConfig(BaseModel):
    """Observatory site location."""

    latitude: float = Field(default=38.9, ge=-90.0, le=90.0)
    longitude: float = Field(default=-117.4, ge=-180.0, le=180.0)
    elevation: float = 1800.0
    timezone: str = "America/Los_Angeles"
    name: str = "NIGHTPLAN Observatory"

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        if not _TIMEZONE_PATTERN.match(value):
            raise ValueError(f"timezone must be an IANA zone name, got {value!r}")
        return value

    def to_location(self) -> "Location":
        """Site position as a scheduling Location."""
        # Imported here: services.scheduling depends on this module
        from services.scheduling.models import Location

        return Location(latitude=self.latitude, longitude=self.longitude)


class SchedulerConfig(BaseModel):
    """Tuning for ranking and slot search."""

    # Slot search
    slot_step_minutes: float = Field(default=15.0, ge=1.0, le=240.0)
    visibility_sampling: Literal["midpoint", "endpoints"] = "midpoint"

    # Defaults for SchedulingConstraints built from config
    default_min_altitude: float = Field(default=30.0, ge=-90.0, le=90.0)
    default_max_airmass: float = Field(default=2.0, ge=1.0)

    # Priority ranking
    difficulty_bonus: dict[str, float] = Field(
        default_factory=lambda: {
            "beginner": 10.0,
            "intermediate": 20.0,
            "advanced": 30.0,
        }
    )
    altitude_bonus: float = 50.0
    airmass_bonus: float = 30.0
    long_sequence_hours: float = Field(default=4.0, gt=0.0)
    long_sequence_penalty: float = 20.0


class NightplanConfig(BaseModel):
    """Root configuration."""

    site: SiteConfig = Field(default_factory=SiteConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None


# =============================================================================
# Loading
# =============================================================================


def get_config_paths() -> list[Path]:
    """Candidate config file locations, most specific first."""
    return [
        Path("./nightplan.yaml"),
        Path.home() / ".nightplan" / "config.yaml",
        Path("/etc/nightplan/config.yaml"),
    ]


def _coerce_env_value(raw: str) -> Any:
    """Convert an environment string to bool/int/float where it looks like one."""
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Merge NIGHTPLAN_<SECTION>_<FIELD> variables into ``data``."""
    sections = {
        name: field_info.annotation
        for name, field_info in NightplanConfig.model_fields.items()
        if isinstance(field_info.annotation, type)
        and issubclass(field_info.annotation, BaseModel)
    }

    for key, raw in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()

        for section, model in sections.items():
            prefix = f"{section}_"
            field_name = name[len(prefix):]
            if name.startswith(prefix) and field_name in model.model_fields:
                section_data = data.setdefault(section, {})
                if model.model_fields[field_name].annotation is str:
                    section_data[field_name] = raw
                else:
                    section_data[field_name] = _coerce_env_value(raw)
                break
        else:
            if name in NightplanConfig.model_fields and name not in sections:
                data[name] = raw

    return data


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {e}",
            config_file=str(path),
        ) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping",
            config_file=str(path),
        )
    return content


def load_config(path: Optional[str | Path] = None) -> NightplanConfig:
    """Load configuration from YAML and the environment.

    Args:
        path: Explicit config file. When omitted, the first existing file
              from get_config_paths() is used, or defaults if none exists.

    Returns:
        Validated NightplanConfig

    Raises:
        ConfigurationError: File missing, YAML invalid, or validation failed
    """
    data: dict[str, Any] = {}
    source: Optional[Path] = None

    if path is not None:
        source = Path(path)
        if not source.exists():
            raise ConfigurationError(
                f"Configuration file not found: {source}",
                config_file=str(source),
            )
    else:
        source = next((p for p in get_config_paths() if p.exists()), None)

    if source is not None:
        data = _read_yaml(source)

    data = _apply_env_overrides(data)

    try:
        return NightplanConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            config_file=str(source) if source else None,
        ) from e
