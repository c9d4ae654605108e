"""Configuration management for D-NAV extraction.

Loads configuration from:
1. dnav.yaml in current directory
2. ~/.config/dnav/dnav.yaml
3. Environment variables (DNAV_* prefix)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionConfig(BaseModel):
    """Candidate extraction limits."""

    max_candidates: int = Field(default=25, ge=1)
    min_score: int = 3
    per_page_limit: int = Field(default=10, ge=1)
    min_segment_chars: int = Field(default=35, ge=1)
    max_segment_chars: int = Field(default=240, ge=1)
    summary_max_chars: int = Field(default=280, ge=20)
    max_chunk_chars: int = Field(default=9_000, ge=100)


class CleaningConfig(BaseModel):
    """Thresholds for header/footer and table detection."""

    short_line_max: int = 80
    header_footer_ratio: float = Field(default=0.6, gt=0, le=1)
    header_footer_min_pages: int = 2
    max_digit_ratio: float = 0.22
    max_numeric_tokens: int = 4
    max_currency_hits: int = 2


class ScoringConfig(BaseModel):
    """Segment scoring weights.

    Only the rank ordering these induce matters; penalties are subtracted.
    """

    commitment_weight: int = 3
    time_anchor_weight: int = 3
    action_noun_weight: int = 2
    constraint_weight: int = 1
    table_penalty: int = 5
    retrospective_penalty: int = 3
    descriptive_penalty: int = 2
    # First-person "I" count or share of words that marks a personal memo
    personal_memo_min_mentions: int = 3
    personal_memo_ratio: float = 0.03


class DedupConfig(BaseModel):
    """Similarity thresholds for near-duplicate detection."""

    # Bigram Jaccard over title + quote (sentence-level)
    sentence_threshold: float = Field(default=0.6, gt=0, le=1)
    # Unigram Jaccard for near-identical text
    near_identical_threshold: float = Field(default=0.85, gt=0, le=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Path | None = None


class Config(BaseSettings):
    """Main configuration for D-NAV extraction."""

    model_config = SettingsConfigDict(
        env_prefix="DNAV_",
        env_nested_delimiter="__",
    )

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Path | None:
    """Find the configuration file.

    Searches in order:
    1. ./dnav.yaml
    2. ~/.config/dnav/dnav.yaml
    """
    locations = [
        Path.cwd() / "dnav.yaml",
        Path.home() / ".config" / "dnav" / "dnav.yaml",
    ]

    for path in locations:
        if path.exists():
            return path

    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        path: Explicit config file; searched for when omitted.

    Returns:
        Config: The loaded configuration.
    """
    config_data: dict[str, Any] = {}

    config_file = path or find_config_file()
    if config_file:
        with open(config_file) as f:
            config_data = yaml.safe_load(f) or {}

    # Environment overrides for common settings
    env_overrides = {
        "DNAV_MAX_CANDIDATES": ("extraction", "max_candidates"),
        "DNAV_MIN_SCORE": ("extraction", "min_score"),
        "DNAV_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, key_path in env_overrides.items():
        value = os.environ.get(env_var)
        if value:
            section, key = key_path
            if section not in config_data:
                config_data[section] = {}
            config_data[section][key] = value

    return Config(**config_data)


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The configuration instance.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None


def with_extraction_overrides(config: Config, **overrides: Any) -> Config:
    """Return a copy of config with extraction settings replaced.

    ``None`` values are ignored so optional CLI/API parameters can be passed
    straight through.

    Args:
        config: Base configuration.
        **overrides: ExtractionConfig field values.

    Returns:
        The original config when nothing changes, otherwise a validated copy.
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    extraction = ExtractionConfig(**{**config.extraction.model_dump(), **updates})
    return config.model_copy(update={"extraction": extraction})
