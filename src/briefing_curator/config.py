"""Configuration management."""

import os
from dataclasses import dataclass, field
from datetime import timedelta, timezone, tzinfo
from pathlib import Path
from typing import Optional

import yaml

from briefing_curator.core.entities import Category, validate_hhmm
from briefing_curator.core.errors import ValidationError
from briefing_curator.core.scoring import (
    DEFAULT_CATEGORY_WEIGHTS,
    DEFAULT_RECENCY_HALF_LIFE_HOURS,
    EMA_ALPHA,
    ScoreWeights,
)


@dataclass
class ScoringConfig:
    """Relevance scoring and learning settings."""
    ema_alpha: float = EMA_ALPHA
    recency_half_life_hours: float = DEFAULT_RECENCY_HALF_LIFE_HOURS
    category_weights: dict[Category, ScoreWeights] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS)
    )


@dataclass
class ScheduleConfig:
    """Local-time settings for mode detection and daily counters."""
    utc_offset_hours: float = 9.0

    @property
    def tz(self) -> tzinfo:
        return timezone(timedelta(hours=self.utc_offset_hours))


@dataclass
class AlertsConfig:
    """Defaults for alert settings that were never saved."""
    quiet_hours_start: str = "23:00"
    quiet_hours_end: str = "07:00"


@dataclass
class PathsConfig:
    """Path settings."""
    state_dir: Path = Path("state")
    output_dir: Path = Path("briefings")


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    json: Optional[bool] = None


@dataclass
class Settings:
    """Application settings."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    alerts: AlertsConfig = field(default_factory=AlertsConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def tz(self) -> tzinfo:
        return self.schedule.tz

    @property
    def state_dir(self) -> Path:
        return self.paths.state_dir


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_category_weights(raw: dict) -> dict[Category, ScoreWeights]:
    """Parse `{category: {interest, context, recency}}` into validated weights."""
    weights = dict(DEFAULT_CATEGORY_WEIGHTS)
    for name, values in raw.items():
        try:
            category = Category(name)
        except ValueError:
            raise ValidationError(f"Unknown category in scoring weights: {name!r}") from None
        weights[category] = ScoreWeights(**values)
    return weights


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    settings = Settings()

    if "scoring" in config:
        scoring = dict(config["scoring"])
        raw_weights = scoring.pop("category_weights", None)
        for key, value in scoring.items():
            setattr(settings.scoring, key, value)
        if raw_weights:
            settings.scoring.category_weights = parse_category_weights(raw_weights)

    if "schedule" in config:
        for key, value in config["schedule"].items():
            setattr(settings.schedule, key, value)

    if "alerts" in config:
        for key, value in config["alerts"].items():
            setattr(settings.alerts, key, validate_hhmm(value))

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value))

    if "logging" in config:
        for key, value in config["logging"].items():
            setattr(settings.logging, key, value)

    # Environment overrides
    state_dir = os.getenv("BRIEFING_STATE_DIR")
    if state_dir:
        settings.paths.state_dir = Path(state_dir)

    log_level = os.getenv("BRIEFING_LOG_LEVEL")
    if log_level:
        settings.logging.level = log_level

    return settings
