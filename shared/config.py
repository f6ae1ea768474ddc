"""
Shared configuration management for the Ruler rule-evaluation engine.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="RULER_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class RulerConfig(BaseConfig):
    """Rule engine configuration."""

    service_name: str = "ruler"

    # "skip" records an unevaluable rule as an error and moves on,
    # "raise" propagates the failure to the caller of evaluate().
    error_policy: Literal["skip", "raise"] = Field(default="skip")

    enable_metrics: bool = Field(default=True)
    # Distinct rule IDs labelled individually in rule_evaluations_total
    metrics_max_rule_series: int = Field(default=1000, ge=1)


def get_config(**overrides) -> RulerConfig:
    """Get configuration for the rule engine."""
    return RulerConfig(**overrides)
