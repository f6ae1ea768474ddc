"""
Ruler service wiring: configuration, logging and the rule engine.
"""

from typing import Optional

from shared.config import RulerConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector

from .rules.engine import RuleEngine


def create_engine(config: Optional[RulerConfig] = None, metrics: Optional[MetricsCollector] = None) -> RuleEngine:
    """Configure logging and build a RuleEngine from configuration."""
    config = config or get_config()
    configure_logging(config.service_name, config.log_level)

    engine = RuleEngine(config=config, metrics=metrics)
    get_logger(config.service_name).info(
        "Rule engine ready",
        env=config.env,
        error_policy=config.error_policy,
        metrics_enabled=engine.metrics is not None
    )
    return engine
