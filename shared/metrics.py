"""
Shared metrics configuration for the Ruler rule-evaluation engine.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry
from typing import Dict, Any, Optional, Set
import time
import threading
from contextlib import contextmanager

# Label for rule IDs past the series cap.
OVERFLOW_RULE_ID = "_other"


class MetricsCollector:
    """Centralized metrics collector for the rule engine."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None,
                 max_rule_series: int = 1000):
        self.service_name = service_name
        self.max_rule_series = max_rule_series
        self._rule_ids: Set[str] = set()
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up rule evaluation metrics."""

        self._metrics["rule_evaluations_total"] = Counter(
            "rule_evaluations_total",
            "Total rule evaluations",
            ["rule_id", "outcome"],
            registry=self.registry
        )

        self._metrics["rule_evaluation_duration_seconds"] = Histogram(
            "rule_evaluation_duration_seconds",
            "Rule evaluation pass duration in seconds",
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_rule_evaluation(self, rule_id: str, outcome: str):
        """
        Record the outcome of one rule evaluation.

        Each distinct rule_id is a new Prometheus series. Only the first
        max_rule_series rule IDs get their own label; later ones are counted
        under OVERFLOW_RULE_ID.
        """
        with self._lock:
            if rule_id not in self._rule_ids:
                if len(self._rule_ids) >= self.max_rule_series:
                    rule_id = OVERFLOW_RULE_ID
                else:
                    self._rule_ids.add(rule_id)
        self._metrics["rule_evaluations_total"].labels(rule_id=rule_id, outcome=outcome).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            metric = self._metrics.get(operation_name)
            if metric is not None:
                if labels:
                    metric = metric.labels(**labels)
                metric.observe(duration)

    def sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read back a sample value from the registry."""
        return self.registry.get_sample_value(name, labels or {})


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None,
                          max_rule_series: int = 1000) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry, max_rule_series)
